"""RehabTrack - treatment progress and assessment engine."""
