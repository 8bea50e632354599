# models/project.py
from datetime import datetime
from extensions import db

PROJECT_STATUSES = ["active", "paused", "completed", "cancelled"]
COMPENSATIONS = ["unpaid", "stipend", "course_credit", "hourly"]
MATERIAL_TYPES = ["document", "image", "video", "link", "other"]


def _iso(dt):
    return dt.isoformat() if dt else None


class Project(db.Model):
    __tablename__ = "projects"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    # owner, fixed at creation
    professor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    department = db.Column(db.String(120), nullable=False, index=True)

    skills = db.Column(db.JSON, default=list)
    tags = db.Column(db.JSON, default=list)

    # requirements.*
    req_gpa = db.Column(db.Float)
    req_years = db.Column(db.JSON, default=list)
    prerequisites = db.Column(db.JSON, default=list)

    duration = db.Column(db.String(120), nullable=False)
    time_commitment = db.Column(db.String(120), nullable=False)
    compensation = db.Column(db.String(20), default="unpaid", nullable=False)
    compensation_amount = db.Column(db.String(80))

    status = db.Column(db.String(20), default="active", nullable=False, index=True)
    max_students = db.Column(db.Integer, default=1, nullable=False)
    # written only by services.capacity
    current_students = db.Column(db.Integer, default=0, nullable=False)

    application_deadline = db.Column(db.DateTime)
    start_date = db.Column(db.DateTime)
    end_date = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    professor = db.relationship("User", lazy="joined")
    materials = db.relationship("ProjectMaterial", backref="project", cascade="all, delete-orphan")
    applications = db.relationship("Application", back_populates="project", cascade="all, delete-orphan")

    __table_args__ = (
        db.CheckConstraint("max_students >= 1", name="ck_project_max_students"),
        db.CheckConstraint(
            "current_students >= 0 AND current_students <= max_students",
            name="ck_project_capacity",
        ),
    )

    def to_dict(self, with_professor=True):
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "professor": self.professor_id,
            "department": self.department,
            "skills": self.skills or [],
            "requirements": {
                "gpa": self.req_gpa,
                "year": self.req_years or [],
                "prerequisites": self.prerequisites or [],
            },
            "duration": self.duration,
            "timeCommitment": self.time_commitment,
            "compensation": self.compensation,
            "compensationAmount": self.compensation_amount,
            "status": self.status,
            "maxStudents": self.max_students,
            "currentStudents": self.current_students,
            "materials": [m.to_dict() for m in self.materials],
            "tags": self.tags or [],
            "applicationDeadline": _iso(self.application_deadline),
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if with_professor and self.professor is not None:
            data["professor"] = self.professor.summary()
        return data

    def summary(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "department": self.department,
            "status": self.status,
        }


class ProjectMaterial(db.Model):
    __tablename__ = "project_materials"
    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey("projects.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(20), nullable=False)  # document/image/video/link/other
    url = db.Column(db.String(500), nullable=False)
    description = db.Column(db.String(500))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "url": self.url,
            "description": self.description,
        }
