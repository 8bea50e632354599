from extensions import db
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime

ROLES = ["student", "professor"]
YEARS = ["Freshman", "Sophomore", "Junior", "Senior", "Graduate"]


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(16), nullable=False, index=True)  # student | professor
    department = db.Column(db.String(120), nullable=False)

    bio = db.Column(db.String(500))
    skills = db.Column(db.JSON, default=list)
    interests = db.Column(db.JSON, default=list)
    avatar = db.Column(db.String(500))

    # students only
    gpa = db.Column(db.Float)
    year = db.Column(db.String(16))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "department": self.department,
            "bio": self.bio,
            "skills": self.skills or [],
            "interests": self.interests or [],
            "gpa": self.gpa,
            "year": self.year,
            "avatar": self.avatar,
        }

    def summary(self, *fields):
        """Compact view embedded in project/application payloads."""
        full = self.to_dict()
        keys = fields or ("id", "name", "email", "department")
        return {k: full.get(k) for k in keys}
