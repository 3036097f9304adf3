"""
Duplicate detection for new registrations.

The lookups here give the registrant a precise error before anything is
written. They are not the correctness boundary: two racing requests can both
pass them, and the unique indexes on ``registrations`` decide which insert
wins. ``conflicting_field`` names the losing field after such a race.
"""
import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.errors import DuplicateDocument, DuplicateField, DuplicateTeam
from app.models.registration import Registration, UNIQUE_FIELDS
from app.schemas.registration import RegistrationCreate

logger = logging.getLogger(__name__)

AADHAR_IMAGE_USED = "This Aadhar card image has already been uploaded"
COLLEGE_ID_USED = "This College ID image has already been uploaded"
SAME_DOCUMENT_TWICE = "Aadhar card and College ID must be different documents"


class DuplicateChecker:
    def __init__(self, db: Session):
        self.db = db

    def _hash_in_use(self, digest: str) -> bool:
        return self.db.query(Registration.id).filter(
            or_(
                Registration.aadhar_image_hash == digest,
                Registration.college_id_hash == digest,
            )
        ).first() is not None

    def check(self, candidate: RegistrationCreate, aadhar_image_hash: str, college_id_hash: str) -> None:
        """
        Raise if the candidate collides with a stored registration

        Order: Aadhar document, college ID document, team within event,
        then each globally unique field.
        """
        if aadhar_image_hash == college_id_hash:
            raise DuplicateDocument(SAME_DOCUMENT_TWICE)

        if self._hash_in_use(aadhar_image_hash):
            logger.info("Rejected %s: Aadhar image hash already on file", candidate.registration_id)
            raise DuplicateDocument(AADHAR_IMAGE_USED)

        if self._hash_in_use(college_id_hash):
            logger.info("Rejected %s: college ID hash already on file", candidate.registration_id)
            raise DuplicateDocument(COLLEGE_ID_USED)

        existing_team = self.db.query(Registration.id).filter(
            Registration.event == candidate.event,
            Registration.team_name == candidate.team_name
        ).first()
        if existing_team:
            raise DuplicateTeam(candidate.team_name, candidate.event)

        field = self.conflicting_field(candidate)
        if field:
            raise DuplicateField(field)

    def conflicting_field(self, candidate: RegistrationCreate) -> Optional[str]:
        """Wire name of the first unique field already taken, if any."""
        for field, column in UNIQUE_FIELDS.items():
            value = getattr(candidate, column)
            exists = self.db.query(Registration.id).filter(
                getattr(Registration, column) == value
            ).first()
            if exists:
                return field
        return None
