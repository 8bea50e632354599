# routes/auth.py
from __future__ import annotations
from flask import Blueprint, current_app, request, jsonify
from datetime import datetime
from functools import wraps
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_jwt,
    get_jwt_identity,
    verify_jwt_in_request,
)
from jwt.exceptions import PyJWTError
from flask_jwt_extended.exceptions import JWTExtendedException
from sqlalchemy.exc import IntegrityError

from extensions import db
from models.user import User
from services.errors import Conflict, Forbidden
from services.validation import validate_registration

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _now_utc() -> datetime:
    return datetime.utcnow()


def _fmt_expires(dt: datetime) -> str:
    return dt.strftime("%Y/%m/%d %H:%M:%S")


def _normalize_roles(user) -> list[str]:
    return [str(user.role)] if getattr(user, "role", None) else []


def _token_payload(user: User) -> dict:
    roles = _normalize_roles(user)
    # identity is always a string, flask-jwt-extended rejects ints with 422
    identity = str(user.id)
    access_expires_at = _now_utc() + current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    claims = {"roles": roles}
    return {
        "success": True,
        "accessToken": create_access_token(
            identity=identity,
            additional_claims=claims,
        ),
        "refreshToken": create_refresh_token(
            identity=identity,
            additional_claims=claims,
        ),
        "expires": _fmt_expires(access_expires_at),
        "user": user.to_dict(),
    }


# ---------- access gate ----------

def has_any_role(user_roles, required_roles) -> bool:
    if isinstance(user_roles, str):
        user_roles = [user_roles]
    return any(role in (user_roles or []) for role in required_roles)


def current_user_id() -> int | None:
    ident = get_jwt_identity()
    if ident is None:
        return None
    if isinstance(ident, dict):
        ident = ident.get("id")
    try:
        return int(ident)
    except (TypeError, ValueError):
        return None


def role_required(*required_roles):
    """
    Require a valid access token whose ``roles`` claim holds one of
    ``required_roles``. Usage: ``@role_required("professor")``.
    """
    def wrapper(fn):
        @wraps(fn)
        def decorated_view(*args, **kwargs):
            verify_jwt_in_request()
            claims = get_jwt() or {}
            user_roles = claims.get("roles") or claims.get("role") or []
            if not has_any_role(user_roles, required_roles):
                raise Forbidden(
                    f"Access denied, requires role: {' or '.join(required_roles)}",
                    "role_required",
                )
            return fn(*args, **kwargs)
        return decorated_view
    return wrapper


# ---------- endpoints ----------

@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    cleaned = validate_registration(data)

    if db.session.query(User.id).filter_by(email=cleaned["email"]).first():
        raise Conflict("User already exists with this email", "email_taken")

    password = cleaned.pop("password")
    user = User(**cleaned)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("User already exists with this email", "email_taken") from None

    return jsonify(_token_payload(user)), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        return jsonify({"success": False, "msg": "Email and password are required"}), 400

    user = db.session.query(User).filter_by(email=email).first()
    if not user or not user.check_password(password):
        return jsonify({"success": False, "msg": "Invalid credentials"}), 401

    return jsonify(_token_payload(user)), 200


@auth_bp.post("/refresh-token")
def refresh_token():
    """Body ``{"refreshToken": "..."}`` -> new access token."""
    data = request.get_json(silent=True) or {}
    raw_refresh = data.get("refreshToken", "")

    if not raw_refresh:
        return jsonify({"success": False, "msg": "refreshToken is required"}), 401

    try:
        decoded = decode_token(raw_refresh)
    except (PyJWTError, JWTExtendedException):
        return jsonify({"success": False, "msg": "refreshToken is invalid or expired"}), 401

    if decoded.get("type") != "refresh":
        return jsonify({"success": False, "msg": "refreshToken is invalid or expired"}), 401

    identity = str(decoded.get("sub") or "")
    user = db.session.get(User, int(identity)) if identity.isdigit() else None
    if user is None:
        return jsonify({"success": False, "msg": "refreshToken is invalid or expired"}), 401

    access_expires_at = _now_utc() + current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    new_access = create_access_token(
        identity=identity,
        additional_claims={"roles": _normalize_roles(user)},
    )
    return jsonify({
        "success": True,
        "accessToken": new_access,
        "refreshToken": raw_refresh,
        "expires": _fmt_expires(access_expires_at),
    }), 200
