"""
Auth and session lifecycle tests.

Verifies:
- Signup creates a customer-role user plus linked Customer record
- Duplicate email and weak/mismatched passwords are rejected with 400
- Login issues a session; bad credentials return 401
- Logout deletes the session and is idempotent
- Expired sessions are treated exactly like unknown tokens
"""

from datetime import timedelta

import pytest

from storefront.models import Customer, Session, User
from storefront.services import auth_service, session_service
from storefront.services.auth_service import InvalidCredentialsError
from storefront.services.session_service import hash_token
from storefront.time_utils import utcnow

PASSWORD = "Password123"


def _signup(client, **overrides):
    body = {
        "name": "Mariam",
        "email": "mariam@example.ae",
        "password": PASSWORD,
        "confirmPassword": PASSWORD,
    }
    body.update(overrides)
    return client.post("/api/auth/signup", json=body)


class TestSignup:

    def test_signup_returns_user_and_session(self, client, db_session):
        resp = _signup(client, phone="+971501234567")
        assert resp.status_code == 201

        data = resp.get_json()
        assert data["user"]["email"] == "mariam@example.ae"
        assert data["user"]["role"] == "customer"
        assert "passwordHash" not in data["user"]
        assert len(data["sessionId"]) == 64

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['sessionId']}"})
        assert me.status_code == 200
        assert me.get_json()["user"]["id"] == data["user"]["id"]

    def test_signup_creates_linked_customer(self, client, db_session):
        resp = _signup(client)
        user_id = resp.get_json()["user"]["id"]

        customer = db_session.query(Customer).filter_by(email="mariam@example.ae").one()
        assert customer.user_id == user_id
        assert customer.total_orders == 0
        assert customer.total_spent_cents == 0

    def test_signup_claims_existing_customer_record(self, client, db_session):
        db_session.add(Customer(name="Guest", email="mariam@example.ae", total_orders=2, total_spent_cents=9000))
        db_session.commit()

        resp = _signup(client)
        assert resp.status_code == 201
        assert db_session.query(Customer).filter_by(email="mariam@example.ae").count() == 1
        customer = db_session.query(Customer).filter_by(email="mariam@example.ae").one()
        assert customer.user_id == resp.get_json()["user"]["id"]
        assert customer.total_orders == 2

    def test_email_is_normalized(self, client, db_session):
        resp = _signup(client, email="  Mariam@Example.AE ")
        assert resp.status_code == 201
        assert resp.get_json()["user"]["email"] == "mariam@example.ae"

    def test_duplicate_email_rejected(self, client, db_session):
        assert _signup(client).status_code == 201
        resp = _signup(client, email="MARIAM@example.ae")
        assert resp.status_code == 400
        assert "already exists" in resp.get_json()["error"]
        assert db_session.query(User).count() == 1

    def test_password_mismatch_rejected(self, client, db_session):
        resp = _signup(client, confirmPassword="Different123")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Passwords do not match"

    def test_weak_password_rejected(self, client, db_session):
        resp = _signup(client, password="short", confirmPassword="short")
        assert resp.status_code == 400
        assert db_session.query(User).count() == 0

    def test_missing_name_rejected(self, client, db_session):
        resp = _signup(client, name="")
        assert resp.status_code == 400

    def test_invalid_email_rejected(self, client, db_session):
        resp = _signup(client, email="not-an-email")
        assert resp.status_code == 400


class TestLogin:

    def test_login_success(self, client, customer_user):
        resp = client.post("/api/auth/login", json={"email": "aisha@example.ae", "password": PASSWORD})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["user"]["id"] == customer_user.id
        assert data["sessionId"]

    def test_wrong_password(self, client, customer_user):
        resp = client.post("/api/auth/login", json={"email": "aisha@example.ae", "password": "Wrong12345"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid email or password"

    def test_unknown_email(self, client, db_session):
        resp = client.post("/api/auth/login", json={"email": "nobody@example.ae", "password": PASSWORD})
        assert resp.status_code == 401

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"email": "aisha@example.ae"})
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "body",
        [
            {"email": 12345, "password": PASSWORD},
            {"email": "aisha@example.ae", "password": 12345678},
            {"email": ["aisha@example.ae"], "password": PASSWORD},
        ],
    )
    def test_non_string_credentials_400(self, client, customer_user, body):
        resp = client.post("/api/auth/login", json=body)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "email and password must be strings"

    def test_authenticate_non_string_is_invalid_credentials(self, customer_user):
        with pytest.raises(InvalidCredentialsError):
            auth_service.authenticate(12345, PASSWORD)
        with pytest.raises(InvalidCredentialsError):
            auth_service.authenticate("aisha@example.ae", 12345678)

    def test_token_is_stored_hashed(self, client, customer_user, db_session):
        resp = client.post("/api/auth/login", json={"email": "aisha@example.ae", "password": PASSWORD})
        token = resp.get_json()["sessionId"]

        assert db_session.query(Session).filter_by(token_hash=token).count() == 0
        assert db_session.query(Session).filter_by(token_hash=hash_token(token)).count() == 1


class TestLogout:

    def test_logout_deletes_session(self, client, customer_headers, db_session):
        assert client.get("/api/auth/me", headers=customer_headers).status_code == 200

        resp = client.post("/api/auth/logout", headers=customer_headers)
        assert resp.status_code == 200
        assert db_session.query(Session).count() == 0

        assert client.get("/api/auth/me", headers=customer_headers).status_code == 401

    def test_logout_is_idempotent(self, client, customer_headers):
        assert client.post("/api/auth/logout", headers=customer_headers).status_code == 200
        assert client.post("/api/auth/logout", headers=customer_headers).status_code == 200

    def test_logout_without_token(self, client, db_session):
        assert client.post("/api/auth/logout").status_code == 200


class TestSessionExpiry:

    def _expire_all(self, db_session):
        for s in db_session.query(Session).all():
            s.expires_at = utcnow() - timedelta(seconds=1)
        db_session.commit()

    def test_expired_session_rejected(self, client, customer_headers, db_session):
        self._expire_all(db_session)

        resp = client.get("/api/auth/me", headers=customer_headers)
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid or expired session"

    def test_expired_same_as_unknown_for_cart(self, client, customer_headers, db_session):
        self._expire_all(db_session)

        expired = client.get("/api/cart", headers=customer_headers)
        unknown = client.get("/api/cart", headers={"Authorization": "Bearer " + "0" * 64})
        assert expired.status_code == unknown.status_code == 401
        assert expired.get_json() == unknown.get_json()

    def test_expired_rows_remain_until_purged(self, client, customer_headers, db_session):
        self._expire_all(db_session)
        client.get("/api/auth/me", headers=customer_headers)
        assert db_session.query(Session).count() == 1

        assert session_service.purge_expired_sessions() == 1
        assert db_session.query(Session).count() == 0

    def test_session_ttl_from_config(self, app, customer_user):
        session, _token = session_service.create_session(customer_user.id)
        lifetime = session.expires_at - session.created_at
        assert lifetime == timedelta(hours=app.config["SESSION_TTL_HOURS"])
