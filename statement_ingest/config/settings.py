"""Global settings and configuration."""
import os
from decimal import Decimal
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Package and project directories
PACKAGE_DIR = Path(__file__).parent.parent
PROJECT_ROOT = PACKAGE_DIR.parent
CONFIG_DATA_DIR = Path(__file__).parent / "data"
LOGS_DIR = Path(os.getenv("LOGS_DIR", str(PROJECT_ROOT / "logs")))

# Upload limits
MAX_FILE_SIZE_MB = int(os.getenv("MAX_FILE_SIZE_MB", "10"))
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
MAX_CSV_SIZE_BYTES = 5 * 1024 * 1024

# Recognition capability
RECOGNITION_PROVIDER = os.getenv("RECOGNITION_PROVIDER", "http")  # http, anthropic or none
OCR_API_URL = os.getenv("OCR_API_URL", "https://ocr-api-leitura-financas.onrender.com")
OCR_API_ENDPOINT = os.getenv("OCR_API_ENDPOINT", "/extract")
OCR_HEALTH_ENDPOINT = os.getenv("OCR_HEALTH_ENDPOINT", "/health/ready")
OCR_TIMEOUT_SECONDS = float(os.getenv("OCR_TIMEOUT_SECONDS", "60"))
OCR_MAX_RETRIES = int(os.getenv("OCR_MAX_RETRIES", "2"))
OCR_RETRY_DELAY_SECONDS = float(os.getenv("OCR_RETRY_DELAY_SECONDS", "2"))
OCR_HEALTH_TIMEOUT_SECONDS = float(os.getenv("OCR_HEALTH_TIMEOUT_SECONDS", "5"))
OCR_MIN_CONFIDENCE = float(os.getenv("OCR_MIN_CONFIDENCE", "0.7"))

# Vision API settings
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
VISION_API_MODEL = os.getenv("VISION_API_MODEL", "claude-sonnet-4-5-20250929")

# Plausibility filter
PLAUSIBILITY_PAST_YEARS = int(os.getenv("PLAUSIBILITY_PAST_YEARS", "2"))
PLAUSIBILITY_FUTURE_MONTHS = int(os.getenv("PLAUSIBILITY_FUTURE_MONTHS", "1"))
MAX_TRANSACTION_AMOUNT = Decimal(os.getenv("MAX_TRANSACTION_AMOUNT", "1000000"))
MIN_DESCRIPTION_LENGTH = 3
MAX_DESCRIPTION_LENGTH = 200

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = Path(os.getenv("LOG_FILE", str(LOGS_DIR / "statement_ingest.log")))

# Currency settings
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "BRL")
CURRENCY_SYMBOLS = {
    "BRL": "R$",
    "USD": "$",
    "EUR": "€",
}
