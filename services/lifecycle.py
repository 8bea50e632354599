# services/lifecycle.py
"""
Application lifecycle manager.

Owns every status change of an ``Application`` and every change of
``Project.current_students``. Callers pass the SQLAlchemy session in; each
public operation is one unit of work and either commits or rolls back
before returning.

    pending --accept--> accepted   (takes a seat)
    pending --reject--> rejected
    pending --withdraw--> withdrawn

Anything else is refused with ``Conflict(code="invalid_transition")``.
"""
import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from models.application import Application, ApplicationStatus
from models.project import Project
from services.capacity import try_reserve_seat
from services.errors import Conflict, Forbidden, NotFound, ValidationFailed

logger = logging.getLogger(__name__)

ACCEPT = "accept"
REJECT = "reject"
WITHDRAW = "withdraw"

TRANSITIONS = {
    (ApplicationStatus.PENDING, ACCEPT): ApplicationStatus.ACCEPTED,
    (ApplicationStatus.PENDING, REJECT): ApplicationStatus.REJECTED,
    (ApplicationStatus.PENDING, WITHDRAW): ApplicationStatus.WITHDRAWN,
}

# wire value of PUT /status -> action
DECISIONS = {
    ApplicationStatus.ACCEPTED.value: ACCEPT,
    ApplicationStatus.REJECTED.value: REJECT,
}


def next_status(current, action: str) -> ApplicationStatus:
    try:
        return TRANSITIONS[(ApplicationStatus(current), action)]
    except (KeyError, ValueError):
        raise Conflict(
            f"Cannot {action} an application that is {current}", "invalid_transition"
        ) from None


def _load_application(session, application_id: int) -> Application:
    app_obj = session.get(Application, application_id)
    if app_obj is None:
        raise NotFound("Application not found", "application_not_found")
    return app_obj


def _leave_pending(session, application_id: int, target: ApplicationStatus, now: datetime, **values) -> bool:
    """Move one row out of ``pending``; False if someone else got there first."""
    result = session.execute(
        update(Application)
        .where(
            Application.id == application_id,
            Application.status == ApplicationStatus.PENDING.value,
        )
        .values(status=target.value, response_date=now, **values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _has_applied(session, student_id: int, project_id: int) -> bool:
    stmt = select(Application.id).where(
        Application.student_id == student_id,
        Application.project_id == project_id,
    )
    return session.execute(stmt).first() is not None


def submit_application(session, student_id: int, project_id: int, cover_letter: str,
                       motivation: str, relevant_experience: str | None = None,
                       now: datetime | None = None) -> Application:
    now = now or datetime.utcnow()

    project = session.get(Project, project_id)
    if project is None:
        raise NotFound("Project not found", "project_not_found")
    if project.status != "active":
        raise Conflict("Project is not accepting applications", "not_accepting")
    if project.application_deadline and now > project.application_deadline:
        raise Conflict("Application deadline has passed", "deadline_passed")

    app_obj = Application(
        student_id=student_id,
        project_id=project.id,
        professor_id=project.professor_id,
        cover_letter=cover_letter,
        relevant_experience=relevant_experience,
        motivation=motivation,
        status=ApplicationStatus.PENDING.value,
        application_date=now,
    )
    session.add(app_obj)
    try:
        # the unique (student_id, project_id) constraint decides duplicates
        session.commit()
    except IntegrityError:
        session.rollback()
        if not _has_applied(session, student_id, project_id):
            raise
        logger.info("duplicate application student=%s project=%s", student_id, project_id)
        raise Conflict("You have already applied to this project", "already_applied") from None

    logger.info("application %s submitted student=%s project=%s", app_obj.id, student_id, project_id)
    return app_obj


def decide_application(session, professor_id: int, application_id: int, decision: str,
                       notes: str | None = None, now: datetime | None = None) -> Application:
    action = DECISIONS.get(decision)
    if action is None:
        raise ValidationFailed([{"field": "status", "msg": "Status must be accepted or rejected"}])
    now = now or datetime.utcnow()

    app_obj = _load_application(session, application_id)
    if app_obj.professor_id != professor_id:
        raise Forbidden("Not authorized to update this application")
    target = next_status(app_obj.status, action)
    project_id = app_obj.project_id

    if not _leave_pending(session, application_id, target, now, professor_notes=notes):
        session.rollback()
        logger.info("application %s already decided, %s refused", application_id, action)
        raise Conflict(f"Cannot {action} an application that is no longer pending", "invalid_transition")

    if target is ApplicationStatus.ACCEPTED and not try_reserve_seat(session, project_id):
        session.rollback()
        raise Conflict("Project has reached maximum capacity", "at_capacity")

    session.commit()
    logger.info("application %s %s by professor=%s project=%s",
                application_id, target.value, professor_id, project_id)
    return _load_application(session, application_id)


def withdraw_application(session, student_id: int, application_id: int,
                         now: datetime | None = None) -> None:
    now = now or datetime.utcnow()

    app_obj = _load_application(session, application_id)
    if app_obj.student_id != student_id:
        raise Forbidden("Not authorized to withdraw this application")
    if app_obj.status != ApplicationStatus.PENDING.value:
        raise Conflict("Cannot withdraw application that has been processed", "invalid_transition")
    target = next_status(app_obj.status, WITHDRAW)

    if not _leave_pending(session, application_id, target, now):
        session.rollback()
        raise Conflict("Cannot withdraw application that has been processed", "invalid_transition")

    session.commit()
    logger.info("application %s withdrawn by student=%s", application_id, student_id)


def get_application(session, user_id: int, application_id: int) -> Application:
    app_obj = _load_application(session, application_id)
    if user_id not in (app_obj.student_id, app_obj.professor_id):
        raise Forbidden("Not authorized to view this application")
    return app_obj


def list_applications_for_student(session, student_id: int) -> list[Application]:
    stmt = (
        select(Application)
        .where(Application.student_id == student_id)
        .order_by(Application.application_date.desc(), Application.id.desc())
    )
    return list(session.scalars(stmt).unique())


def list_applications_for_professor(session, professor_id: int) -> list[Application]:
    stmt = (
        select(Application)
        .where(Application.professor_id == professor_id)
        .order_by(Application.application_date.desc(), Application.id.desc())
    )
    return list(session.scalars(stmt).unique())
