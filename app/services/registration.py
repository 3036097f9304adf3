"""
Registration intake and email confirmation.

A submission moves through validation, upload checks, storage and hashing of
both documents, duplicate checks, a single insert, the confirmation email
and finally a spreadsheet refresh. Any failure before the insert rejects the
request and removes the stored documents. Failures after the insert
(email, spreadsheet) are reported but never undo the registration.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import BackgroundTasks, UploadFile
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.config import UPLOADS_DIR
from app.errors import (
    AlreadyConfirmed,
    DuplicateField,
    RegistrationError,
    RegistrationNotFound,
    TransportError,
)
from app.models.registration import Registration
from app.schemas.registration import RegistrationCreate
from app.services.duplicates import DuplicateChecker
from app.services.export import SnapshotExporter
from app.services.notifications import EmailNotifier
from app.utils.hashing import hash_file
from app.utils.uploads import remove_files, save_upload, single_upload, validate_upload

logger = logging.getLogger(__name__)


@dataclass
class RegistrationOutcome:
    registration: Registration
    email_sent: bool


class RegistrationService:
    def __init__(
        self,
        db: Session,
        notifier: Optional[EmailNotifier] = None,
        exporter: Optional[SnapshotExporter] = None,
        upload_dir: Path = UPLOADS_DIR,
    ):
        self.db = db
        self.notifier = notifier
        self.exporter = exporter
        self.upload_dir = Path(upload_dir)
        self.checker = DuplicateChecker(db)

    async def register(
        self,
        form: Dict[str, Any],
        aadhar_images: Optional[List[UploadFile]],
        college_ids: Optional[List[UploadFile]],
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> RegistrationOutcome:
        candidate = RegistrationCreate.from_form(form)

        aadhar_upload = single_upload(aadhar_images, "aadharImage")
        college_id_upload = single_upload(college_ids, "collegeId")

        # Disk and database work stays off the event loop
        registration = await run_in_threadpool(
            self._store, candidate, aadhar_upload, college_id_upload
        )

        logger.info(
            "Registered team '%s' for %s (%s)",
            registration.team_name, registration.event, registration.registration_id
        )

        email_sent = await self._notify(registration)
        await self._schedule_export(background_tasks)
        return RegistrationOutcome(registration=registration, email_sent=email_sent)

    def _store(
        self,
        candidate: RegistrationCreate,
        aadhar_upload: UploadFile,
        college_id_upload: UploadFile,
    ) -> Registration:
        """Check, save and hash both documents, then insert; stored files are removed on any failure."""
        validate_upload(aadhar_upload)
        validate_upload(college_id_upload)

        stored: List[Path] = []
        persisted = False
        try:
            aadhar_path = save_upload(aadhar_upload, self.upload_dir)
            stored.append(aadhar_path)
            college_id_path = save_upload(college_id_upload, self.upload_dir)
            stored.append(college_id_path)

            aadhar_image_hash = hash_file(aadhar_path)
            college_id_hash = hash_file(college_id_path)

            self.checker.check(candidate, aadhar_image_hash, college_id_hash)

            registration = self._persist(
                candidate, aadhar_path, aadhar_image_hash, college_id_path, college_id_hash
            )
            persisted = True
        finally:
            if not persisted:
                remove_files(*stored)
        return registration

    def _persist(
        self,
        candidate: RegistrationCreate,
        aadhar_path: Path,
        aadhar_image_hash: str,
        college_id_path: Path,
        college_id_hash: str,
    ) -> Registration:
        registration = Registration(
            **candidate.model_dump(),
            aadhar_image=str(aadhar_path),
            aadhar_image_hash=aadhar_image_hash,
            college_id=str(college_id_path),
            college_id_hash=college_id_hash,
        )
        self.db.add(registration)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            # Lost a race with a concurrent submission; find out on which field
            field = self.checker.conflicting_field(candidate)
            logger.info("Insert of %s hit a unique constraint (%s)", candidate.registration_id, field)
            if field:
                raise DuplicateField(field) from exc
            raise RegistrationError("Registration conflicts with an existing record") from exc
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(registration)
        return registration

    async def _notify(self, registration: Registration) -> bool:
        if self.notifier is None:
            return False
        try:
            await self.notifier.send_confirmation(registration)
        except TransportError as exc:
            logger.warning(
                "Registration %s saved but confirmation email failed: %s",
                registration.registration_id, exc.message
            )
            return False
        return True

    async def _schedule_export(self, background_tasks: Optional[BackgroundTasks]) -> None:
        if self.exporter is None:
            return
        if background_tasks is not None:
            background_tasks.add_task(self.exporter.refresh_quietly)
        else:
            await run_in_threadpool(self.exporter.refresh_quietly)

    def confirm(self, registration_id: str) -> None:
        """Flip ``is_confirmed`` once; repeated or unknown confirmations are rejected."""
        updated = self.db.query(Registration).filter(
            Registration.registration_id == registration_id,
            Registration.is_confirmed.is_(False)
        ).update({Registration.is_confirmed: True}, synchronize_session=False)
        self.db.commit()

        if updated:
            logger.info("Registration %s confirmed", registration_id)
            return

        exists = self.db.query(Registration.id).filter(
            Registration.registration_id == registration_id
        ).first()
        if not exists:
            raise RegistrationNotFound()
        raise AlreadyConfirmed()
