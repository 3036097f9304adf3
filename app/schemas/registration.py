import os
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from app.errors import FormValidationError

MOBILE_PATTERN = re.compile(r"[6-9][0-9]{9}")
AADHAR_PATTERN = re.compile(r"[0-9]{12}")
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

FIELD_LABELS = {
    "registration_id": "Registration ID",
    "event": "Event",
    "team_name": "Team name",
    "team_leader_name": "Team leader name",
    "email": "Email",
    "mobile": "Mobile number",
    "gender": "Gender",
    "college": "College",
    "course": "Course",
    "year": "Year",
    "rollno": "Roll number",
    "aadhar": "Aadhar",
    "team_size": "Team size",
}

# Messages used when pydantic's own checks fail on a field
FIELD_MESSAGES = {
    "email": "Invalid email format",
    "teamSize": "Team size must be between 1 and 4",
}


class RegistrationBase(BaseModel):
    registration_id: str
    event: str
    team_name: str
    team_leader_name: str
    email: EmailStr
    mobile: str
    gender: str
    college: str
    course: str
    year: str
    rollno: str
    aadhar: str
    team_size: int = Field(..., ge=1, le=4)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class RegistrationCreate(RegistrationBase):
    """Registration form as submitted by the browser."""

    @field_validator(*FIELD_LABELS, mode="before")
    @classmethod
    def required(cls, value: Any, info) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise PydanticCustomError(
                "required", "{label} is required", {"label": FIELD_LABELS[info.field_name]}
            )
        if isinstance(value, str):
            value = value.strip()
        return value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("team_size", mode="before")
    @classmethod
    def whole_team_size(cls, value: Any) -> Any:
        # Reject "4.0" and "3e0", which lax int parsing would accept
        if isinstance(value, str) and value.strip() and not INTEGER_PATTERN.fullmatch(value.strip()):
            raise PydanticCustomError("team_size", "Team size must be between 1 and 4")
        return value

    @field_validator("mobile")
    @classmethod
    def valid_mobile(cls, value: str) -> str:
        if not MOBILE_PATTERN.fullmatch(value):
            raise PydanticCustomError("mobile", "Invalid mobile number")
        return value

    @field_validator("aadhar")
    @classmethod
    def valid_aadhar(cls, value: str) -> str:
        if not AADHAR_PATTERN.fullmatch(value):
            raise PydanticCustomError("aadhar", "Aadhar must be 12 digits")
        return value

    @classmethod
    def from_form(cls, form: Dict[str, Any]) -> "RegistrationCreate":
        """Validate raw form fields, raising ``FormValidationError`` with every problem found."""
        try:
            return cls.model_validate(form)
        except ValidationError as exc:
            raise FormValidationError(format_errors(exc.errors())) from exc


class RegistrationResponse(RegistrationBase):
    email: str
    aadhar_image: str
    college_id: str
    created_at: datetime
    is_confirmed: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

    @field_validator("aadhar_image", "college_id", mode="before")
    @classmethod
    def file_name_only(cls, value: str) -> str:
        return os.path.basename(value)


class RegistrationResult(BaseModel):
    message: str
    registration_id: str
    email_sent: bool
    data: RegistrationResponse

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str


class ResponseModel(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None


def format_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Optional[str]]]:
    """Flatten pydantic errors into ``{msg, param, location}`` entries keyed by wire name."""
    labels = {to_camel(name): label for name, label in FIELD_LABELS.items()}
    formatted = []
    for error in errors:
        param = str(error["loc"][0]) if error.get("loc") else None
        msg = error["msg"]
        if error["type"] == "missing" and param in labels:
            msg = f"{labels[param]} is required"
        elif error["type"] not in ("required", "mobile", "aadhar") and param in FIELD_MESSAGES:
            msg = FIELD_MESSAGES[param]
        formatted.append({"msg": msg, "param": param, "location": "body"})
    return formatted
