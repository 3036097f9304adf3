import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.drawing.image import Image as SheetImage
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from app.config import EXPORT_SNAPSHOT_FILE
from app.models.registration import Registration

logger = logging.getLogger(__name__)

# (header, record key, column width)
COLUMNS = [
    ("Registration ID", "registration_id", 38),
    ("Event", "event", 20),
    ("Team Name", "team_name", 20),
    ("Team Leader", "team_leader_name", 20),
    ("Email", "email", 28),
    ("Mobile", "mobile", 15),
    ("Gender", "gender", 10),
    ("College", "college", 30),
    ("Course", "course", 15),
    ("Year", "year", 10),
    ("Roll No", "rollno", 15),
    ("Aadhar", "aadhar", 16),
    ("Team Size", "team_size", 10),
    ("Aadhar Image", "aadhar_image", 20),
    ("College ID Image", "college_id", 20),
]
IMAGE_KEYS = {"aadhar_image", "college_id"}
EMBEDDABLE_EXTENSIONS = {".png", ".jpg", ".jpeg"}
IMAGE_SIZE_PX = 100
IMAGE_ROW_HEIGHT = 76  # points, roughly IMAGE_SIZE_PX


class ExcelHandler:
    """Builds the registrations spreadsheet"""

    @staticmethod
    def registration_record(registration: Registration) -> Dict:
        return {key: getattr(registration, key) for _, key, _ in COLUMNS}

    @staticmethod
    def build_workbook(records: Iterable[Dict]) -> Workbook:
        """
        Lays out one row per registration with fixed column order

        Args:
            records: Dictionaries keyed like ``registration_record`` output

        Returns:
            Workbook with a single "Registrations" sheet
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Registrations"

        ws.append([header for header, _, _ in COLUMNS])

        # Header style
        header_fill = PatternFill(start_color="4F46E5", end_color="4F46E5", fill_type="solid")
        header_font = Font(bold=True, color="FFFFFF")

        for cell in ws[1]:
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = Alignment(horizontal="center", vertical="center")

        for row_number, record in enumerate(records, start=2):
            row = []
            for _, key, _ in COLUMNS:
                value = record.get(key, '')
                if key in IMAGE_KEYS:
                    value = Path(value).name if value else ''
                row.append(value)
            ws.append(row)

            embedded = False
            for column_index, (_, key, _) in enumerate(COLUMNS, start=1):
                if key in IMAGE_KEYS and ExcelHandler._embed_image(
                    ws, record.get(key), f"{get_column_letter(column_index)}{row_number}"
                ):
                    # Image covers the cell, drop the file name
                    ws.cell(row=row_number, column=column_index).value = None
                    embedded = True
            if embedded:
                ws.row_dimensions[row_number].height = IMAGE_ROW_HEIGHT

        for i, (_, _, width) in enumerate(COLUMNS, start=1):
            ws.column_dimensions[get_column_letter(i)].width = width

        return wb

    @staticmethod
    def _embed_image(ws, filepath: Optional[str], anchor: str) -> bool:
        if not filepath:
            return False
        path = Path(filepath)
        if path.suffix.lower() not in EMBEDDABLE_EXTENSIONS or not path.exists():
            return False
        try:
            image = SheetImage(str(path))
        except (OSError, ValueError) as e:
            logger.warning("Could not embed %s: %s", path, e)
            return False
        image.width = IMAGE_SIZE_PX
        image.height = IMAGE_SIZE_PX
        ws.add_image(image, anchor)
        return True

    @staticmethod
    def export_to_excel(records: List[Dict], filepath: Path = EXPORT_SNAPSHOT_FILE) -> Path:
        """
        Writes the registrations spreadsheet to disk

        Args:
            records: List of registration dictionaries
            filepath: Destination file (defaults to the snapshot file)

        Returns:
            Path of the written file
        """
        filepath = Path(filepath)
        wb = ExcelHandler.build_workbook(records)
        # Write next to the target then swap so readers never see a partial file
        tmp_path = filepath.with_name(f".{filepath.name}.{datetime.now().strftime('%Y%m%d%H%M%S%f')}.tmp")
        wb.save(tmp_path)
        tmp_path.replace(filepath)
        return filepath

    @staticmethod
    def to_bytes(records: List[Dict]) -> bytes:
        buffer = io.BytesIO()
        ExcelHandler.build_workbook(records).save(buffer)
        return buffer.getvalue()
