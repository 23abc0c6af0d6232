# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Uses bcrypt for password hashing and validates password strength.
Signup also creates (or claims) the Customer record for the email so
checkout can maintain purchase aggregates.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, at least one letter and one digit
- Session tokens managed separately (see session_service.py)
- Unknown email and wrong password produce the same error
"""

import bcrypt
import re

from ..extensions import db
from ..models import User, Customer
from ..models.auth import ROLE_ADMIN, ROLE_CUSTOMER, ROLES
from ..validation import ConflictError, ValidationError, validate_email


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


class InvalidCredentialsError(Exception):
    """Raised when email/password do not match an account."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class DuplicateEmailError(ConflictError):
    """Raised when signing up with an email that already has an account."""

    def __init__(self, message: str = "An account with this email already exists"):
        super().__init__(message)


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. Malformed hashes verify as False.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def get_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter(User.email == email.strip().lower()).first()


def _link_customer(user: User) -> Customer:
    """
    Attach the Customer record for user.email, creating it if needed.

    Customers are keyed by email, so a row already holding this email is
    claimed rather than duplicated.
    """
    customer = db.session.query(Customer).filter_by(email=user.email).first()
    if customer is None:
        customer = Customer(
            email=user.email,
            name=user.name,
            phone=user.phone,
            address=user.address,
            total_orders=0,
            total_spent_cents=0,
        )
        db.session.add(customer)
    customer.user = user
    return customer


def signup(
    *,
    name: str,
    email: str,
    password: str,
    confirm_password: str,
    phone: str | None = None,
    address: dict | None = None,
    role: str = ROLE_CUSTOMER,
) -> User:
    """
    Register a new account and its linked Customer record.

    Raises:
        ValidationError: missing/invalid fields or passwords do not match
        PasswordValidationError: weak password
        DuplicateEmailError: email already registered
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is required")
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
    email = validate_email(email)

    if password != confirm_password:
        raise ValidationError("Passwords do not match")

    if address is not None and not isinstance(address, dict):
        raise ValidationError("address must be an object")

    if get_user_by_email(email):
        raise DuplicateEmailError()

    # Hash password with bcrypt (validates strength automatically)
    password_hash = hash_password(password)

    user = User(
        name=name.strip(),
        email=email,
        password_hash=password_hash,
        role=role,
        phone=phone.strip() if isinstance(phone, str) and phone.strip() else None,
        address=address,
    )
    db.session.add(user)
    _link_customer(user)

    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User:
    """
    Authenticate user with email and password.

    Raises InvalidCredentialsError if the email is unknown or the password
    does not match.
    """
    if not isinstance(email, str) or not isinstance(password, str):
        raise InvalidCredentialsError()
    if not email or not password:
        raise InvalidCredentialsError()

    user = get_user_by_email(email)
    if not user:
        raise InvalidCredentialsError()

    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()

    return user


def create_admin(*, name: str, email: str, password: str) -> User:
    """Create a back-office admin account (CLI only)."""
    return signup(
        name=name,
        email=email,
        password=password,
        confirm_password=password,
        role=ROLE_ADMIN,
    )
