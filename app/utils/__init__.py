from app.utils.excel_handler import ExcelHandler

__all__ = ['ExcelHandler']
