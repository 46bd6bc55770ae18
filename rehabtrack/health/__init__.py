from rehabtrack.health.router import router


__all__ = ["router"]
