# routes/application.py
from flask import Blueprint, request, jsonify

from extensions import db
from routes.auth import current_user_id, role_required
from services import lifecycle
from services.validation import validate_application, validate_decision

application_bp = Blueprint("application_bp", __name__, url_prefix="/api/applications")

STUDENT_VIEW = ("id", "name", "email", "department", "year", "gpa", "skills")
PROFESSOR_VIEW = STUDENT_VIEW + ("interests",)


@application_bp.post("")
@role_required("student")
def submit_application():
    """
    Body: {projectId, coverLetter, motivation, relevantExperience?}
    201 -> the new application (pending)
    """
    data = request.get_json(silent=True) or {}
    cleaned = validate_application(data)
    app_obj = lifecycle.submit_application(
        db.session,
        student_id=current_user_id(),
        project_id=cleaned["project_id"],
        cover_letter=cleaned["cover_letter"],
        motivation=cleaned["motivation"],
        relevant_experience=cleaned["relevant_experience"],
    )
    return jsonify(app_obj.to_dict(STUDENT_VIEW)), 201


@application_bp.get("/student/my-applications")
@role_required("student")
def list_my_applications():
    rows = lifecycle.list_applications_for_student(db.session, current_user_id())
    return jsonify([r.to_dict(STUDENT_VIEW) for r in rows])


@application_bp.get("/professor/my-project-applications")
@role_required("professor")
def list_my_project_applications():
    rows = lifecycle.list_applications_for_professor(db.session, current_user_id())
    return jsonify([r.to_dict(PROFESSOR_VIEW) for r in rows])


@application_bp.get("/<int:app_id>")
@role_required("student", "professor")
def get_application(app_id: int):
    app_obj = lifecycle.get_application(db.session, current_user_id(), app_id)
    return jsonify(app_obj.to_dict(PROFESSOR_VIEW))


@application_bp.put("/<int:app_id>/status")
@role_required("professor")
def decide_application(app_id: int):
    """Body: {status: accepted|rejected, professorNotes?}"""
    data = request.get_json(silent=True) or {}
    cleaned = validate_decision(data)
    app_obj = lifecycle.decide_application(
        db.session,
        professor_id=current_user_id(),
        application_id=app_id,
        decision=cleaned["decision"],
        notes=cleaned["notes"],
    )
    return jsonify(app_obj.to_dict(PROFESSOR_VIEW))


@application_bp.delete("/<int:app_id>")
@role_required("student")
def withdraw_application(app_id: int):
    lifecycle.withdraw_application(db.session, current_user_id(), app_id)
    return jsonify({"msg": "Application withdrawn successfully"})
