"""HTTP tests for /api/user and the authorization gate."""

from tests.conftest import ADMIN_EMAIL, PASSWORD, auth_header, login, register


# =============================================================================
# Service endpoints
# =============================================================================


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "API is running"}


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_unknown_route(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Route not found"}


# =============================================================================
# Register / Login / Logout / Me
# =============================================================================


class TestRegister:
    def test_register(self, client):
        resp = client.post(
            "/api/user/register",
            json={"name": "Nia", "email": "Nia@Example.com", "password": PASSWORD},
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        assert body["token"]
        user = body["user"]
        assert user["email"] == "nia@example.com"
        assert user["is_admin"] is False
        assert user["roles"] == {"access_content": False, "access_product": False}
        assert "password_hash" not in user
        assert "password" not in user

    def test_cannot_self_assign_admin(self, client):
        resp = client.post(
            "/api/user/register",
            json={"name": "Eve", "email": "eve@example.com", "password": PASSWORD, "is_admin": True},
        )
        assert resp.status_code == 201
        assert resp.json()["user"]["is_admin"] is False

    def test_duplicate_email(self, client, reader):
        resp = client.post(
            "/api/user/register",
            json={"name": "Rex 2", "email": "REX@example.com", "password": PASSWORD},
        )
        assert resp.status_code == 400
        assert resp.json() == {
            "success": False,
            "message": "User with this email already exists",
        }

    def test_missing_fields(self, client):
        resp = client.post("/api/user/register", json={"email": "x@example.com"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Please provide name, email, and password"

    def test_malformed_email(self, client):
        resp = client.post(
            "/api/user/register",
            json={"name": "X", "email": "nope", "password": PASSWORD},
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == "Invalid request"
        assert body["error"].startswith("email")


class TestLogin:
    def test_login(self, client, reader):
        resp = client.post("/api/user/login", json={"email": "rex@example.com", "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Login successful"
        assert body["user"]["id"] == reader[1]["id"]

    def test_bad_credentials(self, client, reader):
        wrong = client.post("/api/user/login", json={"email": "rex@example.com", "password": "nope-nope"})
        unknown = client.post("/api/user/login", json={"email": "who@example.com", "password": PASSWORD})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {"success": False, "message": "Invalid credentials"}

    def test_missing_fields(self, client):
        resp = client.post("/api/user/login", json={"email": "rex@example.com"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Please provide email and password"


class TestSession:
    def test_me(self, client, reader):
        token, user = reader
        resp = client.get("/api/user/me", headers=auth_header(token))
        assert resp.status_code == 200
        me = resp.json()["user"]
        assert me["id"] == user["id"]
        assert "created_at" in me
        assert "password_hash" not in me

    def test_logout(self, client, reader):
        resp = client.post("/api/user/logout", headers=auth_header(reader[0]))
        assert resp.status_code == 200
        assert resp.json()["message"] == "Logout successful. Please remove the token from client."

    def test_no_token(self, client):
        resp = client.get("/api/user/me")
        assert resp.status_code == 401
        assert resp.json()["message"] == "Not authorized to access this route. Please login."

    def test_wrong_scheme(self, client, reader):
        resp = client.get("/api/user/me", headers={"Authorization": f"Basic {reader[0]}"})
        assert resp.status_code == 401

    def test_bad_token(self, client):
        resp = client.get("/api/user/me", headers=auth_header("garbage.token.here"))
        assert resp.status_code == 401
        assert resp.json()["message"] == "Not authorized, token failed or expired"

    def test_token_of_deleted_user(self, client, reader, admin_token):
        token, user = reader
        client.delete(f"/api/user/{user['id']}", headers=auth_header(admin_token))
        resp = client.get("/api/user/me", headers=auth_header(token))
        assert resp.status_code == 401
        assert resp.json()["message"] == "User not found"


# =============================================================================
# Admin endpoints
# =============================================================================


class TestAdmin:
    def test_non_admin_is_forbidden(self, client, writer):
        resp = client.get("/api/user/all", headers=auth_header(writer[0]))
        assert resp.status_code == 403
        assert resp.json() == {
            "success": False,
            "message": "Access denied. Admin privileges required.",
        }

    def test_list_users(self, client, admin_token, reader, writer):
        resp = client.get("/api/user/all?limit=2", headers=auth_header(admin_token))
        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 3
        assert body["count"] == 2
        assert body["page"] == 1
        assert body["pages"] == 2
        assert [u["email"] for u in body["users"]] == ["wanda@example.com", "rex@example.com"]
        assert all("password_hash" not in u for u in body["users"])

    def test_bad_pagination(self, client, admin_token):
        resp = client.get("/api/user/all?limit=0", headers=auth_header(admin_token))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid request"

    def test_get_user(self, client, admin_token, reader):
        resp = client.get(f"/api/user/{reader[1]['id']}", headers=auth_header(admin_token))
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "rex@example.com"

    def test_get_missing_user(self, client, admin_token):
        resp = client.get("/api/user/user_missing", headers=auth_header(admin_token))
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "User not found"}

    def test_update_user(self, client, admin_token, reader):
        token, user = reader
        resp = client.put(
            f"/api/user/{user['id']}",
            json={"name": "Rex Writer", "roles": {"access_content": True}},
            headers=auth_header(admin_token),
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "User updated successfully"
        assert body["user"]["name"] == "Rex Writer"
        assert body["user"]["roles"] == {"access_content": True, "access_product": False}
        assert body["user"]["email"] == "rex@example.com"

        # The old token now carries the new permission
        created = client.post(
            "/api/content",
            json={"title": "Promoted", "body": "B", "category": "news"},
            headers=auth_header(token),
        )
        assert created.status_code == 201

    def test_update_email_conflict(self, client, admin_token, reader, writer):
        resp = client.put(
            f"/api/user/{reader[1]['id']}",
            json={"email": "wanda@example.com"},
            headers=auth_header(admin_token),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email already in use"

    def test_update_password(self, client, admin_token, reader):
        client.put(
            f"/api/user/{reader[1]['id']}",
            json={"password": "fresh-password"},
            headers=auth_header(admin_token),
        )
        login(client, "rex@example.com", "fresh-password")

    def test_delete_user(self, client, admin_token, reader):
        user_id = reader[1]["id"]
        resp = client.delete(f"/api/user/{user_id}", headers=auth_header(admin_token))
        assert resp.status_code == 200
        assert resp.json()["message"] == "User deleted successfully"

        again = client.delete(f"/api/user/{user_id}", headers=auth_header(admin_token))
        assert again.status_code == 404

    def test_seeded_admin(self, client, admin_token):
        me = client.get("/api/user/me", headers=auth_header(admin_token)).json()["user"]
        assert me["email"] == ADMIN_EMAIL
        assert me["is_admin"] is True


def test_registration_then_login_round_trip(client):
    _, user = register(client, "Lin", "lin@example.com")
    token = login(client, "lin@example.com")
    me = client.get("/api/user/me", headers=auth_header(token)).json()["user"]
    assert me["id"] == user["id"]


def test_product_access_gate(client, admin_token, reader, writer):
    from fastapi import Depends

    from inkwell.auth.policies import require_product_access

    @client.app.get("/product-only")
    async def product_only(ctx=Depends(require_product_access)):
        return {"success": True}

    denied = client.get("/product-only", headers=auth_header(writer[0]))
    assert denied.status_code == 403
    assert denied.json()["message"] == "Access denied. Product access permission required."

    client.put(
        f"/api/user/{reader[1]['id']}",
        json={"roles": {"access_product": True}},
        headers=auth_header(admin_token),
    )
    assert client.get("/product-only", headers=auth_header(reader[0])).status_code == 200
    assert client.get("/product-only", headers=auth_header(admin_token)).status_code == 200
