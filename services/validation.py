# services/validation.py
"""
Request-body checks run before anything reaches the lifecycle manager.

Each ``validate_*`` collects every failing field and raises a single
``ValidationFailed``; on success it returns a cleaned dict with snake_case
keys ready to be applied to the model.
"""
import re
from datetime import datetime, timezone

from models.project import COMPENSATIONS, MATERIAL_TYPES, PROJECT_STATUSES
from models.user import ROLES, YEARS
from services.errors import ValidationFailed

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PROFILE_FIELDS = ["name", "bio", "skills", "interests", "gpa", "year", "avatar"]


class _Errors:
    def __init__(self):
        self.items = []

    def add(self, field, msg):
        self.items.append({"field": field, "msg": msg})

    def raise_if_any(self):
        if self.items:
            raise ValidationFailed(self.items)


def _text(data, key):
    val = data.get(key)
    if val is None:
        return None
    return str(val).strip()


def _check_len(errors, data, key, min_len=None, max_len=None, required=True, msg=None):
    val = _text(data, key)
    if val is None:
        if required:
            errors.add(key, msg or f"{key} is required")
        return None
    if min_len is not None and len(val) < min_len:
        errors.add(key, msg or f"{key} must be at least {min_len} characters")
    elif max_len is not None and len(val) > max_len:
        errors.add(key, f"{key} must be less than {max_len} characters")
    return val


def _check_gpa(errors, value, field="gpa"):
    if value is None or value == "":
        return None
    try:
        gpa = float(value)
    except (TypeError, ValueError):
        errors.add(field, "GPA must be between 0 and 4.0")
        return None
    if not 0 <= gpa <= 4.0:
        errors.add(field, "GPA must be between 0 and 4.0")
    return gpa


def _check_choice(errors, value, choices, field, required=False):
    if value is None:
        if required:
            errors.add(field, f"{field} must be one of {', '.join(choices)}")
        return None
    if value not in choices:
        errors.add(field, f"{field} must be one of {', '.join(choices)}")
    return value


def _check_str_list(errors, value, field):
    if value is None:
        return None
    if isinstance(value, str):
        value = [v.strip() for v in value.split(",")]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        errors.add(field, f"{field} must be a list of strings")
        return None
    return [v.strip() for v in value if v.strip()]


def _check_date(errors, value, field):
    if value in (None, ""):
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        errors.add(field, f"{field} must be an ISO-8601 date")
        return None
    if parsed.tzinfo is not None:
        # stored naive, UTC
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _check_int(errors, value, field, minimum=None):
    if isinstance(value, bool):
        errors.add(field, f"{field} must be an integer")
        return None
    try:
        num = int(value)
    except (TypeError, ValueError):
        errors.add(field, f"{field} must be an integer")
        return None
    if minimum is not None and num < minimum:
        errors.add(field, f"{field} must be an integer >= {minimum}")
        return None
    return num


# ---------- applications ----------

def validate_application(data: dict) -> dict:
    errors = _Errors()
    project_id = _check_int(errors, data.get("projectId"), "projectId", minimum=1)
    cover = _check_len(errors, data, "coverLetter", 50, 1000,
                       msg="Cover letter must be at least 50 characters")
    motivation = _check_len(errors, data, "motivation", 50, 1000,
                            msg="Motivation must be at least 50 characters")
    experience = _check_len(errors, data, "relevantExperience", max_len=1000, required=False)
    errors.raise_if_any()
    return {
        "project_id": project_id,
        "cover_letter": cover,
        "motivation": motivation,
        "relevant_experience": experience or None,
    }


def validate_decision(data: dict) -> dict:
    errors = _Errors()
    status = data.get("status")
    if status not in ("accepted", "rejected"):
        errors.add("status", "Status must be accepted or rejected")
    notes = _check_len(errors, data, "professorNotes", max_len=1000, required=False)
    errors.raise_if_any()
    return {"decision": status, "notes": notes or None}


# ---------- users ----------

def validate_registration(data: dict) -> dict:
    errors = _Errors()
    name = _check_len(errors, data, "name", 2, 120, msg="Name must be at least 2 characters")
    email = (_text(data, "email") or "").lower()
    if not _EMAIL_RE.match(email):
        errors.add("email", "Please provide a valid email")
    password = data.get("password") or ""
    if len(password) < 6:
        errors.add("password", "Password must be at least 6 characters")
    role = data.get("role")
    if role not in ROLES:
        errors.add("role", "Role must be professor or student")
    department = _check_len(errors, data, "department", 2, 120, msg="Department is required")
    bio = _check_len(errors, data, "bio", max_len=500, required=False)
    gpa = _check_gpa(errors, data.get("gpa"))
    year = _check_choice(errors, data.get("year") or None, YEARS, "year")
    skills = _check_str_list(errors, data.get("skills"), "skills")
    interests = _check_str_list(errors, data.get("interests"), "interests")
    errors.raise_if_any()
    return {
        "name": name,
        "email": email,
        "password": password,
        "role": role,
        "department": department,
        "bio": bio,
        "gpa": gpa,
        "year": year,
        "skills": skills or [],
        "interests": interests or [],
    }


def validate_profile_update(data: dict) -> dict:
    errors = _Errors()
    cleaned = {}
    for key in PROFILE_FIELDS:
        if key not in data:
            continue
        if key == "name":
            cleaned[key] = _check_len(errors, data, "name", 2, 120, msg="Name must be at least 2 characters")
        elif key == "bio":
            cleaned[key] = _check_len(errors, data, "bio", max_len=500, required=False)
        elif key == "gpa":
            cleaned[key] = _check_gpa(errors, data.get("gpa"))
        elif key == "year":
            cleaned[key] = _check_choice(errors, data.get("year") or None, YEARS, "year")
        elif key in ("skills", "interests"):
            cleaned[key] = _check_str_list(errors, data.get(key), key) or []
        else:
            cleaned[key] = _text(data, key)
    errors.raise_if_any()
    return cleaned


# ---------- projects ----------

def _check_requirements(errors, req):
    if not isinstance(req, dict):
        errors.add("requirements", "requirements must be an object")
        return {}
    cleaned = {}
    if "gpa" in req:
        cleaned["req_gpa"] = _check_gpa(errors, req.get("gpa"), "requirements.gpa")
    if "year" in req:
        years = _check_str_list(errors, req.get("year"), "requirements.year") or []
        bad = [y for y in years if y not in YEARS]
        if bad:
            errors.add("requirements.year", f"Invalid year: {', '.join(bad)}")
        cleaned["req_years"] = years
    if "prerequisites" in req:
        cleaned["prerequisites"] = _check_str_list(errors, req.get("prerequisites"), "requirements.prerequisites") or []
    return cleaned


def _check_materials(errors, materials):
    if not isinstance(materials, list):
        errors.add("materials", "materials must be a list")
        return []
    cleaned = []
    for idx, m in enumerate(materials):
        field = f"materials[{idx}]"
        if not isinstance(m, dict):
            errors.add(field, "material must be an object")
            continue
        name = (m.get("name") or "").strip()
        url = (m.get("url") or "").strip()
        if not name:
            errors.add(f"{field}.name", "name is required")
        if not url:
            errors.add(f"{field}.url", "url is required")
        _check_choice(errors, m.get("type"), MATERIAL_TYPES, f"{field}.type", required=True)
        cleaned.append({
            "name": name,
            "type": m.get("type"),
            "url": url,
            "description": (m.get("description") or "").strip() or None,
        })
    return cleaned


def validate_project(data: dict, partial: bool = False) -> dict:
    """
    ``partial=True`` checks only the keys present (PUT). ``professor`` and
    ``currentStudents`` are never copied out.
    """
    errors = _Errors()
    cleaned = {}

    def present(key):
        return key in data or not partial

    if present("title"):
        cleaned["title"] = _check_len(errors, data, "title", 5, 200,
                                      msg="Title must be at least 5 characters")
    if present("description"):
        cleaned["description"] = _check_len(errors, data, "description", 50, 2000,
                                            msg="Description must be at least 50 characters")
    if present("department"):
        cleaned["department"] = _check_len(errors, data, "department", 2, 120, msg="Department is required")
    if present("duration"):
        cleaned["duration"] = _check_len(errors, data, "duration", 1, 120, msg="Duration is required")
    if present("timeCommitment"):
        cleaned["time_commitment"] = _check_len(errors, data, "timeCommitment", 1, 120,
                                                msg="Time commitment is required")
    if "compensation" in data:
        cleaned["compensation"] = _check_choice(errors, data.get("compensation"), COMPENSATIONS, "compensation",
                                                required=True)
    if "compensationAmount" in data:
        cleaned["compensation_amount"] = _text(data, "compensationAmount") or None
    if "status" in data:
        cleaned["status"] = _check_choice(errors, data.get("status"), PROJECT_STATUSES, "status", required=True)
    if "maxStudents" in data:
        cleaned["max_students"] = _check_int(errors, data.get("maxStudents"), "maxStudents", minimum=1)
    for key in ("skills", "tags"):
        if key in data:
            cleaned[key] = _check_str_list(errors, data.get(key), key) or []
    for key, col in (("applicationDeadline", "application_deadline"),
                     ("startDate", "start_date"), ("endDate", "end_date")):
        if key in data:
            cleaned[col] = _check_date(errors, data.get(key), key)
    if "requirements" in data and data["requirements"] is not None:
        cleaned.update(_check_requirements(errors, data["requirements"]))
    if "materials" in data and data["materials"] is not None:
        cleaned["materials"] = _check_materials(errors, data["materials"])

    errors.raise_if_any()
    return cleaned
