"""
Tests for the /api/collection endpoints
"""
import pytest

from questlog.auth import create_user_with_token


ELDEN_RING = {
    "id": 1,
    "name": "Elden Ring",
    "summary": "An action RPG set in the Lands Between.",
    "first_release_date": 1645747200,
    "coverImageId": "co4jni",
    "coverUrl": "https://images.igdb.com/igdb/image/upload/t_cover_big/co4jni.jpg",
}


@pytest.fixture
def added(client, auth_headers):
    response = client.post("/api/collection", json=ELDEN_RING, headers=auth_headers)
    assert response.status_code == 201
    return response.get_json()["data"]


class TestAuthentication:

    def test_requires_token(self, client):
        response = client.get("/api/collection")
        assert response.status_code == 401
        assert response.get_json()["code"] == "UNAUTHORIZED"

    def test_rejects_unknown_token(self, client):
        response = client.get("/api/collection", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


class TestAddAndList:

    def test_add_copies_display_fields(self, added):
        assert added["id"] == 1
        assert added["title"] == "Elden Ring"
        assert added["coverUrl"].endswith("co4jni.jpg")
        assert added["addedAt"].endswith("Z")
        assert added["rating"] is None
        assert added["playthrough"]["status"] is None

    def test_duplicate_is_a_conflict(self, client, auth_headers, added):
        response = client.post("/api/collection", json=ELDEN_RING, headers=auth_headers)
        assert response.status_code == 409

    @pytest.mark.parametrize("game_id", [None, 0, -3, "abc", True])
    def test_invalid_id(self, client, auth_headers, game_id):
        response = client.post("/api/collection", json={"id": game_id, "name": "X"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()["code"] == "VALIDATION_ERROR"

    def test_list_newest_first(self, client, auth_headers, added):
        client.post("/api/collection", json={"id": 3, "name": "Space Shooter X"}, headers=auth_headers)
        data = client.get("/api/collection", headers=auth_headers).get_json()["data"]
        assert data["total"] == 2
        assert [item["id"] for item in data["items"]] == [3, 1]

    def test_get_single_entry(self, client, auth_headers, added):
        response = client.get("/api/collection/1", headers=auth_headers)
        assert response.get_json()["data"]["name"] == "Elden Ring"
        assert client.get("/api/collection/999", headers=auth_headers).status_code == 404

    def test_collections_are_per_user(self, app, client, auth_headers, added):
        with app.app_context():
            _, other_token = create_user_with_token("player-two")
        other = {"Authorization": f"Bearer {other_token}"}
        assert client.get("/api/collection", headers=other).get_json()["data"]["total"] == 0
        assert client.post("/api/collection", json=ELDEN_RING, headers=other).status_code == 201


class TestRating:

    def test_set_and_clear(self, client, auth_headers, added):
        response = client.put("/api/collection/1/rating", json={"rating": 8}, headers=auth_headers)
        assert response.get_json()["data"]["rating"] == 8

        response = client.put("/api/collection/1/rating", json={"rating": None}, headers=auth_headers)
        assert response.get_json()["data"]["rating"] is None

    @pytest.mark.parametrize("rating", [11, -1, 7.5, "great"])
    def test_out_of_range(self, client, auth_headers, added, rating):
        response = client.put("/api/collection/1/rating", json={"rating": rating}, headers=auth_headers)
        assert response.status_code == 400

    def test_missing_rating_key(self, client, auth_headers, added):
        response = client.put("/api/collection/1/rating", json={}, headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()["details"]["field"] == "rating"

    def test_not_in_collection(self, client, auth_headers):
        response = client.put("/api/collection/42/rating", json={"rating": 5}, headers=auth_headers)
        assert response.status_code == 404


class TestPlaythrough:

    def test_save_normalizes_values(self, client, auth_headers, added):
        payload = {
            "status": "Playing",
            "completionPercent": 150,
            "achievementsUnlocked": 12.7,
            "achievementsTotal": -4,
            "hoursPlayed": "41.5",
            "notes": "  Beat Margit  ",
        }
        response = client.put("/api/collection/1/playthrough", json=payload, headers=auth_headers)
        assert response.status_code == 200
        playthrough = response.get_json()["data"]["playthrough"]
        assert playthrough == {
            "status": "playing",
            "completionPercent": 100,
            "achievementsUnlocked": 12,
            "achievementsTotal": 0,
            "hoursPlayed": 41.5,
            "notes": "Beat Margit",
        }

    def test_unknown_status(self, client, auth_headers, added):
        response = client.put("/api/collection/1/playthrough", json={"status": "speedrunning"},
                              headers=auth_headers)
        assert response.status_code == 400

    def test_save_replaces_previous_values(self, client, auth_headers, added):
        client.put("/api/collection/1/playthrough", json={"status": "playing", "notes": "x"}, headers=auth_headers)
        response = client.put("/api/collection/1/playthrough", json={"status": "completed"}, headers=auth_headers)
        playthrough = response.get_json()["data"]["playthrough"]
        assert playthrough["status"] == "completed"
        assert playthrough["notes"] is None


class TestRemoval:

    def test_remove_one(self, client, auth_headers, added):
        assert client.delete("/api/collection/1", headers=auth_headers).status_code == 200
        assert client.delete("/api/collection/1", headers=auth_headers).status_code == 404

    def test_wipe(self, client, auth_headers, added):
        client.post("/api/collection", json={"id": 3, "name": "Space Shooter X"}, headers=auth_headers)
        response = client.delete("/api/collection", headers=auth_headers)
        assert response.get_json()["data"]["removed"] == 2
        assert client.get("/api/collection", headers=auth_headers).get_json()["data"]["total"] == 0
