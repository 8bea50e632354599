# routes/project.py
import math

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import String, cast, or_

from extensions import db
from models.project import Project, ProjectMaterial
from routes.auth import current_user_id, role_required
from services.capacity import read_capacity, try_resize
from services.errors import Conflict, Forbidden, NotFound
from services.validation import validate_project

project_bp = Blueprint("project_bp", __name__, url_prefix="/api/projects")


# ------- helpers -------

def _get_project_or_404(pid: int) -> Project:
    p = db.session.get(Project, pid)
    if p is None:
        raise NotFound("Project not found", "project_not_found")
    return p


def _owned_project(pid: int, action: str) -> Project:
    p = _get_project_or_404(pid)
    if p.professor_id != current_user_id():
        raise Forbidden(f"Not authorized to {action} this project")
    return p


def _json_text(col):
    return cast(col, String)


def _apply_filters(query, args):
    # status defaults to active, same as the public listing
    status = (args.get("status") or "active").strip()
    query = query.filter(Project.status == status)

    search = (args.get("search") or "").strip()
    if search:
        like = f"%{search}%"
        query = query.filter(
            or_(
                Project.title.ilike(like),
                Project.description.ilike(like),
                Project.department.ilike(like),
                _json_text(Project.skills).ilike(like),
                _json_text(Project.tags).ilike(like),
            )
        )

    department = (args.get("department") or "").strip()
    if department:
        query = query.filter(Project.department.ilike(f"%{department}%"))

    skills = [s.strip() for s in (args.get("skills") or "").split(",") if s.strip()]
    if skills:
        query = query.filter(
            or_(*[_json_text(Project.skills).ilike(f'%"{s}"%') for s in skills])
        )
    return query


def _set_materials(p: Project, materials: list[dict]):
    p.materials = [ProjectMaterial(**m) for m in materials]


# ------- public -------

@project_bp.get("")
def list_projects():
    page = max(request.args.get("page", 1, type=int) or 1, 1)
    limit = request.args.get("limit", current_app.config["PROJECTS_PAGE_SIZE"], type=int)
    limit = max(1, min(limit or 1, 100))

    query = _apply_filters(db.session.query(Project), request.args)
    total = query.count()
    items = (
        query.order_by(Project.created_at.desc(), Project.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify({
        "projects": [p.to_dict() for p in items],
        "totalPages": math.ceil(total / limit),
        "currentPage": page,
        "total": total,
    })


@project_bp.get("/<int:pid>")
def get_project(pid: int):
    p = _get_project_or_404(pid)
    data = p.to_dict(with_professor=False)
    data["professor"] = p.professor.summary("id", "name", "email", "department", "bio")
    return jsonify(data)


@project_bp.get("/<int:pid>/capacity")
def get_capacity(pid: int):
    return jsonify(read_capacity(db.session, pid).to_dict())


# ------- professor -------

@project_bp.get("/professor/my-projects")
@role_required("professor")
def my_projects():
    items = (
        db.session.query(Project)
        .filter(Project.professor_id == current_user_id())
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )
    return jsonify([p.to_dict() for p in items])


@project_bp.post("")
@role_required("professor")
def create_project():
    data = request.get_json(silent=True) or {}
    cleaned = validate_project(data)
    materials = cleaned.pop("materials", [])

    p = Project(professor_id=current_user_id(), current_students=0)
    for k, v in cleaned.items():
        if v is not None:
            setattr(p, k, v)
    _set_materials(p, materials)

    db.session.add(p)
    db.session.commit()
    current_app.logger.info("project %s created by professor=%s", p.id, p.professor_id)
    return jsonify(p.to_dict()), 201


@project_bp.put("/<int:pid>")
@role_required("professor")
def update_project(pid: int):
    p = _owned_project(pid, "update")
    data = request.get_json(silent=True) or {}
    cleaned = validate_project(data, partial=True)

    max_students = cleaned.pop("max_students", None)
    materials = cleaned.pop("materials", None)
    for k, v in cleaned.items():
        setattr(p, k, v)
    # simple approach: rebuild materials
    if materials is not None:
        _set_materials(p, materials)
    db.session.flush()

    if max_students is not None and not try_resize(db.session, pid, max_students):
        db.session.rollback()
        raise Conflict(
            "maxStudents cannot be lower than the number of accepted students",
            "capacity_below_enrolled",
        )

    db.session.commit()
    return jsonify(_get_project_or_404(pid).to_dict())


@project_bp.delete("/<int:pid>")
@role_required("professor")
def delete_project(pid: int):
    p = _owned_project(pid, "delete")
    # applications and materials go with it (cascade)
    db.session.delete(p)
    db.session.commit()
    current_app.logger.info("project %s deleted by professor=%s", pid, current_user_id())
    return jsonify({"msg": "Project deleted successfully"})
