# services/capacity.py
import logging
from dataclasses import dataclass

from sqlalchemy import select, update

from models.project import Project
from services.errors import NotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capacity:
    current_students: int
    max_students: int
    status: str

    @property
    def has_open_seat(self) -> bool:
        return self.current_students < self.max_students

    def to_dict(self):
        return {
            "currentStudents": self.current_students,
            "maxStudents": self.max_students,
            "status": self.status,
        }


def read_capacity(session, project_id: int) -> Capacity:
    row = session.execute(
        select(Project.current_students, Project.max_students, Project.status)
        .where(Project.id == project_id)
    ).first()
    if row is None:
        raise NotFound("Project not found", "project_not_found")
    return Capacity(current_students=row[0], max_students=row[1], status=row[2])


def try_reserve_seat(session, project_id: int) -> bool:
    """
    Compare-and-increment ``current_students``.

    A single UPDATE guarded by ``current_students < max_students``; returns
    False when no row matched (project full or gone). Runs in the caller's
    transaction and does not commit.
    """
    result = session.execute(
        update(Project)
        .where(Project.id == project_id, Project.current_students < Project.max_students)
        .values(current_students=Project.current_students + 1)
        .execution_options(synchronize_session=False)
    )
    reserved = result.rowcount == 1
    if not reserved:
        logger.warning("project %s has no open seat", project_id)
    return reserved


def try_resize(session, project_id: int, max_students: int) -> bool:
    """Set ``max_students`` unless it would drop below the seats already taken."""
    result = session.execute(
        update(Project)
        .where(Project.id == project_id, Project.current_students <= max_students)
        .values(max_students=max_students)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
