import logging
from pathlib import Path
from typing import Callable, Dict, List

from sqlalchemy.orm import Session

from app.config import EXPORT_SNAPSHOT_FILE
from app.database.session import SessionLocal
from app.errors import TransportError
from app.models.registration import Registration
from app.utils.excel_handler import ExcelHandler

logger = logging.getLogger(__name__)


def all_records(db: Session) -> List[Dict]:
    registrations = db.query(Registration).order_by(Registration.created_at, Registration.id).all()
    return [ExcelHandler.registration_record(r) for r in registrations]


class SnapshotExporter:
    """Keeps the on-disk registrations spreadsheet in step with the database"""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal,
                 filepath: Path = EXPORT_SNAPSHOT_FILE):
        self.session_factory = session_factory
        self.filepath = Path(filepath)

    def refresh(self) -> Path:
        db = self.session_factory()
        try:
            records = all_records(db)
            path = ExcelHandler.export_to_excel(records, self.filepath)
        except Exception as exc:
            raise TransportError("Failed to refresh registrations spreadsheet") from exc
        finally:
            db.close()
        logger.info("Registrations spreadsheet updated with %d rows: %s", len(records), path)
        return path

    def refresh_quietly(self) -> None:
        """Background-task entry point; failures are logged and dropped."""
        try:
            self.refresh()
        except TransportError:
            logger.exception("Spreadsheet refresh failed")
