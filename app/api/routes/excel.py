import io
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.services.export import all_records
from app.utils.excel_handler import ExcelHandler

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/export-excel", response_model=None)
def export_registrations(db: Session = Depends(get_db)):
    """Download every registration as an Excel workbook"""
    records = all_records(db)
    content = ExcelHandler.to_bytes(records)
    logger.info("Exporting %d registrations", len(records))

    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="registrations.xlsx"'}
    )
