from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional

from app.api.deps import get_db, get_exporter, get_notifier
from app.config import EVENTS, REFRESH_EXPORT_ON_REGISTER
from app.schemas.registration import (
    MessageResponse,
    RegistrationResponse,
    RegistrationResult,
    ResponseModel
)
from app.services.export import SnapshotExporter
from app.services.notifications import EmailNotifier
from app.services.registration import RegistrationService

router = APIRouter()

REGISTERED = "Registration successful. Please check your email to confirm."
REGISTERED_EMAIL_FAILED = (
    "Registration successful, but the confirmation email could not be sent. "
    "Please contact support to confirm your registration."
)


@router.get("/events", response_model=ResponseModel)
def list_events():
    """Events offered on the registration form"""
    return {
        "success": True,
        "message": "Events fetched successfully",
        "data": [{"value": value, "label": label} for value, label in EVENTS.items()]
    }


@router.post("/register", response_model=RegistrationResult)
async def register(
    background_tasks: BackgroundTasks,
    registration_id: Optional[str] = Form(None, alias="registrationId"),
    event: Optional[str] = Form(None),
    team_name: Optional[str] = Form(None, alias="teamName"),
    team_leader_name: Optional[str] = Form(None, alias="teamLeaderName"),
    email: Optional[str] = Form(None),
    mobile: Optional[str] = Form(None),
    gender: Optional[str] = Form(None),
    college: Optional[str] = Form(None),
    course: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    rollno: Optional[str] = Form(None),
    aadhar: Optional[str] = Form(None),
    team_size: Optional[str] = Form(None, alias="teamSize"),
    aadhar_image: Optional[List[UploadFile]] = File(None, alias="aadharImage"),
    college_id: Optional[List[UploadFile]] = File(None, alias="collegeId"),
    db: Session = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
    exporter: SnapshotExporter = Depends(get_exporter)
):
    """Register a team with its Aadhar card and college ID documents"""
    form = {
        "registrationId": registration_id,
        "event": event,
        "teamName": team_name,
        "teamLeaderName": team_leader_name,
        "email": email,
        "mobile": mobile,
        "gender": gender,
        "college": college,
        "course": course,
        "year": year,
        "rollno": rollno,
        "aadhar": aadhar,
        "teamSize": team_size
    }

    service = RegistrationService(db, notifier, exporter if REFRESH_EXPORT_ON_REGISTER else None)
    outcome = await service.register(form, aadhar_image, college_id, background_tasks)
    registration = outcome.registration

    return RegistrationResult(
        message=REGISTERED if outcome.email_sent else REGISTERED_EMAIL_FAILED,
        registration_id=registration.registration_id,
        email_sent=outcome.email_sent,
        data=RegistrationResponse.model_validate(registration)
    )


@router.get("/confirm/{registration_id}", response_model=MessageResponse)
def confirm_registration(
    registration_id: str,
    db: Session = Depends(get_db)
):
    """Confirm the registrant's email from the emailed link"""
    RegistrationService(db).confirm(registration_id)
    return {"message": "Email confirmed successfully"}
