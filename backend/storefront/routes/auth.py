# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/storefront/routes/auth.py
"""
Authentication API routes

- POST /signup: create account + linked customer, returns a session
- POST /login: email/password, returns a session
- POST /logout: deletes the bearer session (idempotent)
- GET  /me: current user

The session token is returned as "sessionId" and must be sent back as
"Authorization: Bearer <sessionId>".
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services.auth_service import DuplicateEmailError, InvalidCredentialsError
from ..validation import ValidationError
from ..decorators import bearer_token, require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user, session, token) -> dict:
    return {
        "user": user.to_dict(),
        "sessionId": token,
        "expiresAt": session.to_dict()["expiresAt"],
    }


@auth_bp.post("/signup")
def signup_route():
    """
    Register a shopper account.

    Request body:
    {
        "name": "Aisha",
        "email": "aisha@example.ae",
        "password": "...",
        "confirmPassword": "...",
        "phone": "+971...",         // optional
        "address": {...}            // optional
    }
    """
    data = request.get_json(silent=True) or {}

    try:
        user = auth_service.signup(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            confirm_password=data.get("confirmPassword"),
            phone=data.get("phone"),
            address=data.get("address"),
        )
        session, token = session_service.create_session(user.id)
    except (ValidationError, DuplicateEmailError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to sign up user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(_session_payload(user, session, token)), 201


@auth_bp.post("/login")
def login_route():
    """Authenticate with email/password and create a session."""
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "email and password required"}), 400
    if not isinstance(email, str) or not isinstance(password, str):
        return jsonify({"error": "email and password must be strings"}), 400

    try:
        user = auth_service.authenticate(email, password)
        session, token = session_service.create_session(user.id)
    except InvalidCredentialsError as e:
        return jsonify({"error": str(e)}), 401
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(_session_payload(user, session, token)), 200


@auth_bp.post("/logout")
def logout_route():
    """
    Delete the bearer session.

    Always 200: logging out twice, or with an expired/unknown token, is not
    an error.
    """
    token = bearer_token()
    try:
        if token:
            session_service.delete_session(token)
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()}), 200
