# services/errors.py
"""
Typed outcomes returned by the services layer.

Every refusal is raised as a ``LifecycleError`` subclass; ``app.py`` renders
them as ``{"msg", "code"}`` JSON with ``status_code``. ``code`` lets the
client tell e.g. ``at_capacity`` apart from ``not_authorized``.
"""


class LifecycleError(Exception):
    status_code = 400
    default_code = "error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        return {"msg": self.message, "code": self.code}


class NotFound(LifecycleError):
    status_code = 404
    default_code = "not_found"


class Conflict(LifecycleError):
    status_code = 409
    default_code = "conflict"


class Forbidden(LifecycleError):
    status_code = 403
    default_code = "not_authorized"


class ValidationFailed(LifecycleError):
    status_code = 400
    default_code = "validation_error"

    def __init__(self, errors: list[dict], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["errors"] = self.errors
        return data
