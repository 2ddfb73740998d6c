"""Tests for profile and trip history endpoints."""

import pytest


@pytest.mark.unit
class TestProfile:
    def test_me(self, client, driver_headers):
        response = client.get("/users/me", headers=driver_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == "2"
        assert data["role"] == "driver"
        assert data["name"] == "Jane Driver"

    def test_update_profile(self, client, passenger_headers):
        response = client.patch(
            "/users/me",
            json={"name": "Johnny Passenger", "profilePicture": "https://example.com/me.png"},
            headers=passenger_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Johnny Passenger"
        assert data["profilePicture"] == "https://example.com/me.png"
        assert data["phone"] == "+1234567890"

    def test_invalid_phone(self, client, passenger_headers):
        response = client.patch("/users/me", json={"phone": "call me"}, headers=passenger_headers)

        assert response.status_code == 422


@pytest.mark.unit
@pytest.mark.critical
class TestTripHistory:
    def test_passenger_history(self, client, passenger_headers):
        response = client.get("/users/1/rides", headers=passenger_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalTrips"] == 3
        assert data["totalSpent"] == 25.33
        assert data["totalEarned"] == 0.0
        assert data["averageRating"] == 4.5
        assert [r["id"] for r in data["rides"]] == ["ride_003", "ride_001", "ride_002"]

    def test_driver_earnings(self, client, driver_headers):
        data = client.get("/users/2/rides", headers=driver_headers).json()["data"]

        assert data["totalTrips"] == 2
        assert data["totalEarned"] == 20.26

    def test_pagination(self, client, passenger_headers):
        data = client.get(
            "/users/1/rides", params={"page": 2, "limit": 2}, headers=passenger_headers
        ).json()["data"]

        assert [r["id"] for r in data["rides"]] == ["ride_002"]
        assert data["page"] == 2
        assert data["limit"] == 2

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}])
    def test_invalid_pagination(self, client, passenger_headers, params):
        response = client.get("/users/1/rides", params=params, headers=passenger_headers)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_other_users_history_forbidden(self, client, passenger_headers):
        response = client.get("/users/2/rides", headers=passenger_headers)

        assert response.status_code == 403

    def test_admin_reads_any_history(self, client, admin_headers):
        response = client.get("/users/1/rides", headers=admin_headers)

        assert response.json()["data"]["totalTrips"] == 3
