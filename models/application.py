# models/application.py
import enum
from datetime import datetime
from extensions import db


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


STATUSES = [s.value for s in ApplicationStatus]


class Application(db.Model):
    __tablename__ = "applications"
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    project_id = db.Column(db.Integer, db.ForeignKey("projects.id"), nullable=False, index=True)
    # copied from the project at submit time
    professor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    cover_letter = db.Column(db.String(1000), nullable=False)
    relevant_experience = db.Column(db.String(1000))
    motivation = db.Column(db.String(1000), nullable=False)

    status = db.Column(db.String(16), default=ApplicationStatus.PENDING.value, nullable=False, index=True)
    professor_notes = db.Column(db.String(1000))
    application_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    response_date = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = db.relationship("User", foreign_keys=[student_id], lazy="joined")
    professor = db.relationship("User", foreign_keys=[professor_id], lazy="joined")
    project = db.relationship("Project", back_populates="applications", lazy="joined")

    # one application per (student, project), whatever its status
    __table_args__ = (
        db.UniqueConstraint("student_id", "project_id", name="uq_application_student_project"),
    )

    def to_dict(self, student_fields=None):
        student_fields = student_fields or ("id", "name", "email", "department", "year", "gpa", "skills")
        return {
            "id": self.id,
            "student": self.student.summary(*student_fields) if self.student else self.student_id,
            "project": self.project.summary() if self.project else self.project_id,
            "professor": self.professor.summary() if self.professor else self.professor_id,
            "coverLetter": self.cover_letter,
            "relevantExperience": self.relevant_experience,
            "motivation": self.motivation,
            "status": self.status,
            "professorNotes": self.professor_notes,
            "applicationDate": self.application_date.isoformat() if self.application_date else None,
            "responseDate": self.response_date.isoformat() if self.response_date else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
