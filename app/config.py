import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Base directories
BASE_DIR = Path(__file__).resolve().parent.parent
UPLOADS_DIR = Path(os.getenv("UPLOADS_DIR", str(BASE_DIR / "uploads")))
EXPORTS_DIR = Path(os.getenv("EXPORTS_DIR", str(BASE_DIR / "exports")))

# Create directories if missing
UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
EXPORTS_DIR.mkdir(parents=True, exist_ok=True)

EXPORT_SNAPSHOT_FILE = EXPORTS_DIR / "registrations.xlsx"

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://user:password@db:5432/techfest_db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Events offered by the registration form
EVENTS = {
    "robo-race": "ROBO RACE",
    "project-exhibition": "PROJECT EXHIBITION",
    "cultural-event": "CULTURAL EVENT",
    "rangoli": "RANGOLI COMPETITION",
    "dance": "DANCE COMPETITION",
    "code-puzzle": "CODE PUZZLE",
    "nukkad-natak": "NUKKAD NATAK",
    "singing": "SINGING COMPETITION",
    "ad-mad": "AD-MAD SHOW",
}

# CORS
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

# Rate limiting
RATE_LIMIT = os.getenv("RATE_LIMIT", "100/15minutes")
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

# Document uploads
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", "300000"))  # 300 KB
# Two documents plus the form fields
MAX_REQUEST_SIZE = int(os.getenv("MAX_REQUEST_SIZE", str(2 * MAX_UPLOAD_SIZE + 64 * 1024)))
ALLOWED_MEDIA_TYPES = {"image/jpeg", "image/jpg", "image/png", "application/pdf"}
ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".pdf"}

# Email
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", os.getenv("EMAIL_USER", ""))
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", os.getenv("EMAIL_PASS", ""))
EMAIL_FROM = os.getenv("EMAIL_FROM", SMTP_USER)
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "HIET Event Management Team")
SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "support@hietghaziabad.com")

# Host used to build confirmation links
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000").rstrip("/")

# Rewrite the spreadsheet snapshot after every successful registration
REFRESH_EXPORT_ON_REGISTER = os.getenv("REFRESH_EXPORT_ON_REGISTER", "true").lower() == "true"
