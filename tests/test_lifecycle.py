"""
Application lifecycle: transitions, capacity and uniqueness.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import LETTER, MOTIVATION, accepted_count, make_project, make_user
from models.application import Application, ApplicationStatus
from models.project import Project
from services import lifecycle
from services.errors import Conflict, Forbidden, NotFound, ValidationFailed


def submit(session, student, project, **kw):
    return lifecycle.submit_application(
        session, student.id, project.id, LETTER, MOTIVATION, **kw
    )


def seats(session, project_id):
    session.expire_all()
    return session.get(Project, project_id).current_students


class TestTransitionTable:

    @pytest.mark.parametrize("action,expected", [
        (lifecycle.ACCEPT, ApplicationStatus.ACCEPTED),
        (lifecycle.REJECT, ApplicationStatus.REJECTED),
        (lifecycle.WITHDRAW, ApplicationStatus.WITHDRAWN),
    ])
    def test_pending_moves_out(self, action, expected):
        assert lifecycle.next_status("pending", action) is expected

    @pytest.mark.parametrize("current", ["accepted", "rejected", "withdrawn"])
    @pytest.mark.parametrize("action", [lifecycle.ACCEPT, lifecycle.REJECT, lifecycle.WITHDRAW])
    def test_terminal_states_refuse_everything(self, current, action):
        with pytest.raises(Conflict) as exc:
            lifecycle.next_status(current, action)
        assert exc.value.code == "invalid_transition"

    def test_unknown_status_is_refused(self):
        with pytest.raises(Conflict):
            lifecycle.next_status("archived", lifecycle.ACCEPT)


class TestSubmit:

    def test_creates_pending_application(self, session, student, project, professor):
        app_obj = submit(session, student, project)

        assert app_obj.status == "pending"
        assert app_obj.professor_id == professor.id
        assert app_obj.application_date is not None
        assert app_obj.response_date is None

    def test_missing_project(self, session, student):
        with pytest.raises(NotFound):
            lifecycle.submit_application(session, student.id, 9999, LETTER, MOTIVATION)

    @pytest.mark.parametrize("status", ["paused", "completed", "cancelled"])
    def test_inactive_project_refused(self, session, student, professor, status):
        project = make_project(professor, status=status)

        with pytest.raises(Conflict) as exc:
            submit(session, student, project)

        assert exc.value.code == "not_accepting"
        assert Application.query.count() == 0

    def test_deadline_passed(self, session, student, professor):
        project = make_project(professor, application_deadline=datetime.utcnow() - timedelta(days=1))

        with pytest.raises(Conflict) as exc:
            submit(session, student, project)

        assert exc.value.code == "deadline_passed"
        assert Application.query.count() == 0

    def test_future_deadline_allowed(self, session, student, professor):
        project = make_project(professor, application_deadline=datetime.utcnow() + timedelta(days=3))
        assert submit(session, student, project).status == "pending"

    def test_duplicate_refused(self, session, student, project):
        submit(session, student, project)

        with pytest.raises(Conflict) as exc:
            submit(session, student, project)

        assert exc.value.code == "already_applied"
        assert Application.query.filter_by(student_id=student.id).count() == 1

    def test_other_integrity_errors_are_not_duplicates(self, session, student, project):
        with pytest.raises(IntegrityError):
            lifecycle.submit_application(session, student.id, project.id, None, MOTIVATION)

        assert Application.query.filter_by(student_id=student.id).count() == 0

    def test_withdrawn_application_still_blocks_reapply(self, session, student, project):
        app_obj = submit(session, student, project)
        lifecycle.withdraw_application(session, student.id, app_obj.id)

        with pytest.raises(Conflict) as exc:
            submit(session, student, project)
        assert exc.value.code == "already_applied"


class TestDecide:

    def test_accept_takes_a_seat(self, session, student, project, professor):
        app_obj = submit(session, student, project)

        decided = lifecycle.decide_application(
            session, professor.id, app_obj.id, "accepted", notes="Welcome aboard"
        )

        assert decided.status == "accepted"
        assert decided.response_date is not None
        assert decided.professor_notes == "Welcome aboard"
        assert seats(session, project.id) == 1
        assert accepted_count(project.id) == 1

    def test_reject_keeps_capacity(self, session, student, project, professor):
        app_obj = submit(session, student, project)

        decided = lifecycle.decide_application(session, professor.id, app_obj.id, "rejected")

        assert decided.status == "rejected"
        assert decided.response_date is not None
        assert seats(session, project.id) == 0

    def test_full_project_refuses_accept(self, session, project, professor):
        alice = make_user("student", email="alice@uni.edu")
        bob = make_user("student", email="bob@uni.edu")
        a = submit(session, alice, project)
        lifecycle.decide_application(session, professor.id, a.id, "accepted")

        # bob can still apply, the project stays active
        b = submit(session, bob, project)
        assert b.status == "pending"

        with pytest.raises(Conflict) as exc:
            lifecycle.decide_application(session, professor.id, b.id, "accepted")

        assert exc.value.code == "at_capacity"
        session.expire_all()
        assert session.get(Application, b.id).status == "pending"
        assert session.get(Application, b.id).response_date is None
        assert seats(session, project.id) == 1

    def test_full_project_still_allows_reject(self, session, project, professor):
        alice = make_user("student", email="alice@uni.edu")
        bob = make_user("student", email="bob@uni.edu")
        lifecycle.decide_application(session, professor.id, submit(session, alice, project).id, "accepted")
        b = submit(session, bob, project)

        assert lifecycle.decide_application(session, professor.id, b.id, "rejected").status == "rejected"

    def test_other_professor_forbidden(self, session, student, project):
        intruder = make_user("professor", email="other@uni.edu")
        app_obj = submit(session, student, project)

        with pytest.raises(Forbidden):
            lifecycle.decide_application(session, intruder.id, app_obj.id, "accepted")
        assert seats(session, project.id) == 0

    def test_decided_application_cannot_be_decided_again(self, session, student, project, professor):
        app_obj = submit(session, student, project)
        lifecycle.decide_application(session, professor.id, app_obj.id, "rejected")

        with pytest.raises(Conflict) as exc:
            lifecycle.decide_application(session, professor.id, app_obj.id, "accepted")

        assert exc.value.code == "invalid_transition"
        assert seats(session, project.id) == 0

    def test_missing_application(self, session, professor):
        with pytest.raises(NotFound):
            lifecycle.decide_application(session, professor.id, 424242, "accepted")

    def test_unknown_decision(self, session, student, project, professor):
        app_obj = submit(session, student, project)
        with pytest.raises(ValidationFailed):
            lifecycle.decide_application(session, professor.id, app_obj.id, "withdrawn")


class TestWithdraw:

    def test_pending_can_be_withdrawn(self, session, student, project):
        app_obj = submit(session, student, project)

        lifecycle.withdraw_application(session, student.id, app_obj.id)

        session.expire_all()
        withdrawn = session.get(Application, app_obj.id)
        assert withdrawn.status == "withdrawn"
        assert withdrawn.response_date is not None
        assert seats(session, project.id) == 0

    @pytest.mark.parametrize("decision", ["accepted", "rejected"])
    def test_decided_cannot_be_withdrawn(self, session, student, project, professor, decision):
        app_obj = submit(session, student, project)
        lifecycle.decide_application(session, professor.id, app_obj.id, decision)

        with pytest.raises(Conflict) as exc:
            lifecycle.withdraw_application(session, student.id, app_obj.id)

        assert exc.value.code == "invalid_transition"
        assert seats(session, project.id) == (1 if decision == "accepted" else 0)

    def test_other_student_forbidden(self, session, student, project):
        app_obj = submit(session, student, project)
        mallory = make_user("student", email="mallory@uni.edu")

        with pytest.raises(Forbidden):
            lifecycle.withdraw_application(session, mallory.id, app_obj.id)


class TestListing:

    def test_student_listing_newest_first(self, session, student, professor):
        older = make_project(professor, title="Older project")
        newer = make_project(professor, title="Newer project")
        now = datetime.utcnow()
        submit(session, student, older, now=now - timedelta(hours=2))
        submit(session, student, newer, now=now)

        rows = lifecycle.list_applications_for_student(session, student.id)

        assert [r.project_id for r in rows] == [newer.id, older.id]

    def test_professor_listing_only_own_projects(self, session, student, professor):
        mine = make_project(professor)
        other_prof = make_user("professor", email="other@uni.edu")
        theirs = make_project(other_prof)
        submit(session, student, mine)
        submit(session, student, theirs)

        rows = lifecycle.list_applications_for_professor(session, professor.id)

        assert [r.project_id for r in rows] == [mine.id]

    def test_get_application_visibility(self, session, student, project, professor):
        app_obj = submit(session, student, project)
        stranger = make_user("student", email="stranger@uni.edu")

        assert lifecycle.get_application(session, student.id, app_obj.id).id == app_obj.id
        assert lifecycle.get_application(session, professor.id, app_obj.id).id == app_obj.id
        with pytest.raises(Forbidden):
            lifecycle.get_application(session, stranger.id, app_obj.id)


def test_seat_count_matches_accepted_applications(session, professor):
    project = make_project(professor, max_students=3)
    students = [make_user("student", email=f"s{i}@uni.edu") for i in range(5)]
    apps = [submit(session, s, project) for s in students]

    for app_obj, decision in zip(apps, ["accepted", "rejected", "accepted", "accepted", "accepted"]):
        try:
            lifecycle.decide_application(session, professor.id, app_obj.id, decision)
        except Conflict:
            pass
        assert seats(session, project.id) == accepted_count(project.id)

    assert seats(session, project.id) == 3
