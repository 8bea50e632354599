# routes/user.py
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from extensions import db
from models.user import User
from routes.auth import current_user_id
from services.errors import NotFound
from services.validation import validate_profile_update

user_bp = Blueprint("user_bp", __name__, url_prefix="/api/users")


def _current_user() -> User:
    user = db.session.get(User, current_user_id() or 0)
    if user is None:
        raise NotFound("User not found", "user_not_found")
    return user


@user_bp.get("/profile")
@jwt_required()
def get_profile():
    return jsonify({"user": _current_user().to_dict()})


@user_bp.put("/profile")
@jwt_required()
def put_profile():
    user = _current_user()
    data = request.get_json(silent=True) or {}
    # email, role and department are not editable here
    for k, v in validate_profile_update(data).items():
        setattr(user, k, v)
    db.session.commit()
    return jsonify({"user": user.to_dict()})


@user_bp.get("/departments")
def list_departments():
    rows = db.session.query(User.department).distinct().all()
    return jsonify(sorted({r[0] for r in rows if r[0]}))


@user_bp.get("/skills")
def list_skills():
    skills = set()
    for (vals,) in db.session.query(User.skills).all():
        skills.update(s for s in (vals or []) if s)
    return jsonify(sorted(skills))
