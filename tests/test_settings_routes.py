"""
Tests for the /api/settings endpoints
"""


class TestGetSettings:

    def test_defaults(self, client, auth_headers):
        response = client.get("/api/settings", headers=auth_headers)
        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["username"] == "Player One"
        assert data["settings"] == {
            "hideMature": True,
            "tagFilters": [],
            "minRating": 0,
            "theme": "dark",
            "font": "default",
        }

    def test_requires_token(self, client):
        assert client.get("/api/settings").status_code == 401


class TestUpdateSettings:

    def test_nested_settings_are_normalized(self, client, auth_headers):
        payload = {"settings": {"minRating": "70", "tagFilters": "RPG, Shooter,", "theme": "neon", "font": "readable"}}
        response = client.patch("/api/settings", json=payload, headers=auth_headers)
        assert response.status_code == 200
        settings = response.get_json()["data"]["settings"]
        assert settings["minRating"] == 70
        assert settings["tagFilters"] == ["RPG", "Shooter"]
        assert settings["theme"] == "dark"
        assert settings["font"] == "readable"
        assert settings["hideMature"] is True

    def test_top_level_keys_and_persistence(self, client, auth_headers):
        client.put("/api/settings", json={"hideMature": False, "theme": "forest"}, headers=auth_headers)
        settings = client.get("/api/settings", headers=auth_headers).get_json()["data"]["settings"]
        assert settings["hideMature"] is False
        assert settings["theme"] == "forest"

    def test_partial_update_keeps_other_keys(self, client, auth_headers):
        client.patch("/api/settings", json={"settings": {"minRating": 60}}, headers=auth_headers)
        client.patch("/api/settings", json={"settings": {"font": "readable"}}, headers=auth_headers)
        settings = client.get("/api/settings", headers=auth_headers).get_json()["data"]["settings"]
        assert settings["minRating"] == 60
        assert settings["font"] == "readable"

    def test_negative_min_rating_becomes_zero(self, client, auth_headers):
        response = client.patch("/api/settings", json={"minRating": -10}, headers=auth_headers)
        assert response.get_json()["data"]["settings"]["minRating"] == 0

    def test_username(self, client, auth_headers):
        response = client.patch("/api/settings", json={"username": "  Tarnished  "}, headers=auth_headers)
        assert response.get_json()["data"]["username"] == "Tarnished"

    def test_username_too_long(self, client, auth_headers):
        response = client.patch("/api/settings", json={"username": "x" * 25}, headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()["code"] == "VALIDATION_ERROR"

    def test_non_object_payload(self, client, auth_headers):
        response = client.patch("/api/settings", json=["minRating"], headers=auth_headers)
        assert response.status_code == 400


class TestThemes:

    def test_public_theme_list(self, client):
        data = client.get("/api/settings/themes").get_json()["data"]
        assert {"dark", "light"} <= {t["id"] for t in data["themes"]}
        assert data["fonts"] == ["default", "readable"]
