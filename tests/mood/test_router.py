"""Tests for mood endpoints."""


class TestMoodEndpoints:
    """Tests for /v1/mood."""

    def test_submit_and_list(self, client, patient_headers) -> None:
        response = client.post(
            "/v1/mood",
            json={"mood_type": "calm", "mood_score": 8, "journal_entry": "Slept well"},
            headers=patient_headers,
        )

        assert response.status_code == 201
        created = response.json()
        assert created["mood_type"] == "calm"
        assert created["mood_score"] == 8

        listed = client.get("/v1/mood", headers=patient_headers)
        assert listed.status_code == 200
        assert listed.json()["total"] == 1
        assert listed.json()["items"][0]["id"] == created["id"]

    def test_score_out_of_range(self, client, engine, patient_headers) -> None:
        response = client.post(
            "/v1/mood",
            json={"mood_type": "calm", "mood_score": 11},
            headers=patient_headers,
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "invalid_input"
        assert engine.moods.entries == []

    def test_invalid_limit(self, client, patient_headers) -> None:
        response = client.get("/v1/mood?limit=0", headers=patient_headers)

        assert response.status_code == 422

    def test_admin_rejected(self, client, admin_headers) -> None:
        response = client.get("/v1/mood", headers=admin_headers)

        assert response.status_code == 403
        assert response.json()["kind"] == "unauthorized"

    def test_missing_token(self, client) -> None:
        response = client.post("/v1/mood", json={"mood_type": "sad", "mood_score": 2})

        assert response.status_code == 401
        assert response.json()["kind"] == "unauthenticated"
