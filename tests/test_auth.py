"""Tests for registration, login and logout."""

from taskmanager.models import User


def _register(client, **overrides):
    data = {
        "username": "carol",
        "email": "Carol@Example.com",
        "password": "secret123",
        "confirm_password": "secret123",
    }
    data.update(overrides)
    return client.post("/register", data=data)


class TestRegister:
    def test_register_form(self, client, db):
        response = client.get("/register")
        assert response.status_code == 200

    def test_register_success(self, client, db):
        response = _register(client)

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/tasks/")

        user = db.session.query(User).filter_by(username="carol").one()
        assert user.email == "carol@example.com"
        assert user.password_hash != "secret123"
        assert user.check_password("secret123")

        with client.session_transaction() as sess:
            assert sess["user"]["id"] == user.session_id
            assert sess["user"]["username"] == "carol"

    def test_register_reports_every_problem(self, client, db):
        response = _register(
            client, username="ca", email="nope", password="123", confirm_password="456"
        )
        html = response.get_data(as_text=True)

        assert response.status_code == 400
        assert "Username must be at least 3 characters long" in html
        assert "Please enter a valid email address" in html
        assert "Password must be at least 6 characters long" in html
        assert "Passwords do not match" in html
        assert db.session.query(User).count() == 0

    def test_register_duplicate_username(self, client, user):
        response = _register(client, username="alice")
        assert response.status_code == 409
        assert "Username or email already exists" in response.get_data(as_text=True)

    def test_register_duplicate_email_any_case(self, client, user):
        response = _register(client, email="ALICE@example.com")
        assert response.status_code == 409

    def test_logged_in_user_skips_register(self, auth_client):
        response = auth_client.get("/register")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/tasks/")


class TestLogin:
    def test_login_form(self, client, db):
        assert client.get("/login").status_code == 200

    def test_login_success(self, client, user):
        response = client.post(
            "/login", data={"email": "alice@example.com", "password": "password123"}
        )

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/tasks/")
        with client.session_transaction() as sess:
            assert sess["user"]["id"] == user.session_id

    def test_login_email_is_case_insensitive(self, client, user):
        response = client.post(
            "/login", data={"email": "ALICE@Example.com", "password": "password123"}
        )
        assert response.status_code == 302

    def test_login_wrong_password(self, client, user):
        response = client.post(
            "/login", data={"email": "alice@example.com", "password": "wrongpassword"}
        )
        assert response.status_code == 401
        assert "Invalid email or password" in response.get_data(as_text=True)

    def test_login_unknown_email_same_message(self, client, db):
        response = client.post(
            "/login", data={"email": "nobody@example.com", "password": "password123"}
        )
        assert response.status_code == 401
        assert "Invalid email or password" in response.get_data(as_text=True)

    def test_login_missing_fields(self, client, db):
        response = client.post("/login", data={"email": "alice@example.com"})
        assert response.status_code == 400
        assert "Email and password are required" in response.get_data(as_text=True)

    def test_login_returns_to_requested_page(self, client, user):
        client.get("/tasks/list?sort=title")
        response = client.post(
            "/login", data={"email": "alice@example.com", "password": "password123"}
        )

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/tasks/list?sort=title")

    def test_login_after_rejected_post_goes_to_dashboard(self, client, user):
        client.post("/tasks/delete/3")
        response = client.post(
            "/login", data={"email": "alice@example.com", "password": "password123"}
        )

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/tasks/")

    def test_external_return_to_is_ignored(self, client, user):
        with client.session_transaction() as sess:
            sess["return_to"] = "//evil.example.com/"
        response = client.post(
            "/login", data={"email": "alice@example.com", "password": "password123"}
        )
        assert response.headers["Location"].endswith("/tasks/")


class TestLogout:
    def test_logout_clears_session(self, auth_client):
        response = auth_client.get("/logout")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/login")

        response = auth_client.get("/tasks/")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/login")


class TestIndex:
    def test_anonymous_goes_to_login(self, client, db):
        response = client.get("/")
        assert response.headers["Location"].endswith("/login")

    def test_logged_in_goes_to_dashboard(self, auth_client):
        response = auth_client.get("/")
        assert response.headers["Location"].endswith("/tasks/")
