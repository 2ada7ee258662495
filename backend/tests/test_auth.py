"""
Tests for authentication endpoints.
"""

from shared.security.auth import verify_jwt


class TestLogin:
    """Tests for POST /api/auth/login."""

    def test_login_success(self, client, seed_admin_user, seed_restaurant):
        """Valid credentials should return a token."""
        response = client.post(
            "/api/auth/login",
            json={"email": "admin@test.com", "password": "testpass123"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "Bearer"
        assert data["expires_in"] == 7 * 24 * 60 * 60
        assert data["user"]["email"] == "admin@test.com"
        assert data["user"]["role"] == "ADMIN"
        assert data["user"]["restaurant_ids"] == [seed_restaurant.id]

        claims = verify_jwt(data["access_token"])
        assert claims["sub"] == str(seed_admin_user.id)
        assert claims["tenant_id"] == seed_admin_user.tenant_id
        assert claims["restaurant_ids"] == [seed_restaurant.id]

    def test_login_email_is_case_insensitive(self, client, seed_admin_user):
        response = client.post(
            "/api/auth/login",
            json={"email": "Admin@Test.com", "password": "testpass123"},
        )
        assert response.status_code == 200

    def test_login_wrong_password(self, client, seed_admin_user):
        """Wrong password should return 401."""
        response = client.post(
            "/api/auth/login",
            json={"email": "admin@test.com", "password": "wrongpassword"},
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    def test_login_unknown_email_same_error(self, client, seed_admin_user):
        response = client.post(
            "/api/auth/login",
            json={"email": "nobody@test.com", "password": "testpass123"},
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    def test_login_inactive_user(self, client, make_user):
        make_user("WAITER", email="gone@test.com", is_active=False)
        response = client.post(
            "/api/auth/login",
            json={"email": "gone@test.com", "password": "testpass123"},
        )
        assert response.status_code == 401

    def test_login_invalid_email_format(self, client):
        response = client.post(
            "/api/auth/login",
            json={"email": "not-an-email", "password": "x"},
        )
        assert response.status_code == 400
        assert "error" in response.json()


class TestMe:
    """Tests for GET /api/auth/me."""

    def test_me_returns_current_user(self, client, auth_headers, seed_admin_user):
        response = client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["id"] == seed_admin_user.id

    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Missing Authorization header"}

    def test_me_with_malformed_header(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Token abc"})
        assert response.status_code == 401

    def test_me_with_table_token_rejected(self, client, table_headers):
        response = client.get(
            "/api/auth/me",
            headers={"Authorization": f"Bearer {table_headers['X-Table-Token']}"},
        )
        assert response.status_code == 401


class TestRegister:
    """Tests for POST /api/auth/register (ADMIN only)."""

    def test_admin_registers_staff(self, client, auth_headers, seed_admin_user):
        response = client.post(
            "/api/auth/register",
            json={
                "name": "New Waiter",
                "email": "New.Waiter@test.com",
                "password": "longenough",
                "role": "WAITER",
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "new.waiter@test.com"
        assert data["tenant_id"] == seed_admin_user.tenant_id
        assert data["is_active"] is True
        assert "password_hash" not in data

        login = client.post(
            "/api/auth/login",
            json={"email": "new.waiter@test.com", "password": "longenough"},
        )
        assert login.status_code == 200

    def test_duplicate_email_conflicts(self, client, auth_headers):
        response = client.post(
            "/api/auth/register",
            json={"name": "Again", "email": "admin@test.com", "password": "longenough", "role": "CHEF"},
            headers=auth_headers,
        )
        assert response.status_code == 409

    def test_invalid_role(self, client, auth_headers):
        response = client.post(
            "/api/auth/register",
            json={"name": "X", "email": "x@test.com", "password": "longenough", "role": "MANAGER"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_waiter_cannot_register(self, client, waiter_headers):
        response = client.post(
            "/api/auth/register",
            json={"name": "X", "email": "x@test.com", "password": "longenough", "role": "WAITER"},
            headers=waiter_headers,
        )
        assert response.status_code == 403


class TestChangePassword:
    def test_change_password(self, client, auth_headers):
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": "testpass123", "new_password": "evenbetter123"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}

        old = client.post(
            "/api/auth/login",
            json={"email": "admin@test.com", "password": "testpass123"},
        )
        assert old.status_code == 401
        new = client.post(
            "/api/auth/login",
            json={"email": "admin@test.com", "password": "evenbetter123"},
        )
        assert new.status_code == 200

    def test_wrong_current_password(self, client, auth_headers):
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": "nope", "new_password": "evenbetter123"},
            headers=auth_headers,
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Current password is incorrect"}
