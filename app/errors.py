"""
Registration error taxonomy.

Every expected failure of the registration and confirmation flows is a
``RegistrationError`` carrying the HTTP status and the client-visible message.
The handlers registered in ``app.main`` turn them into ``{"error": ...}`` or
``{"errors": [...]}`` bodies; anything else becomes a generic 500.
"""
from typing import Any, Dict, List, Optional


class RegistrationError(Exception):
    """Base class for failures that are reported to the client."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class FormValidationError(RegistrationError):
    """One or more form fields are missing or malformed (400)."""

    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        super().__init__("Validation failed")

    def to_dict(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class UploadError(RegistrationError):
    """Missing, oversized or wrong-type document upload (400)."""


class DuplicateDocument(RegistrationError):
    """An uploaded document matches one already on file (400)."""


class DuplicateTeam(RegistrationError):
    """The team is already registered for the event (400)."""

    def __init__(self, team_name: str, event: str):
        self.team_name = team_name
        self.event = event
        super().__init__(f"Team '{team_name}' is already registered for '{event}'")


class DuplicateField(RegistrationError):
    """A globally unique field collides with an existing record (400)."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} already exists")


class RegistrationNotFound(RegistrationError):
    status_code = 404

    def __init__(self, message: str = "Registration not found"):
        super().__init__(message)


class AlreadyConfirmed(RegistrationError):
    def __init__(self, message: str = "Email already confirmed"):
        super().__init__(message)


class HashingError(RegistrationError):
    """A stored document could not be read back for hashing (500)."""

    status_code = 500

    def __init__(self, message: str = "Could not read uploaded document"):
        super().__init__(message)


class TransportError(RegistrationError):
    """The email or spreadsheet collaborator failed.

    Raised by the collaborators and caught by the workflow, which never
    rolls back a stored registration because of it.
    """

    status_code = 500
