"""
medextract project settings.

Every value can be overridden through an environment variable of the same
name. Before using the AI path set GEMINI_API_KEY; before using the Google
Vision engine point GOOGLE_APPLICATION_CREDENTIALS at a service account file.
"""

import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, "1" if default else "0").strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# PROJECT PATHS
# =============================================================================
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_DIR = Path(__file__).parent
MEDICAL_VOCABULARY_FILE = Path(
    os.getenv("MEDICAL_VOCABULARY_FILE", str(CONFIG_DIR / "medical_vocabulary.yaml"))
)

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# =============================================================================
# OCR ENGINE
# =============================================================================
# "tesseract" or "google_vision"
OCR_ENGINE = os.getenv("OCR_ENGINE", "tesseract")

# Path to the tesseract binary (None = look it up on PATH)
TESSERACT_CMD = os.getenv("TESSERACT_CMD")

# Single recognition locale (Tesseract language code)
OCR_LOCALE = os.getenv("OCR_LOCALE", "eng")

# Language hints for Google Vision, derived from the locale above
GOOGLE_VISION_LANGUAGE_HINTS = ["en"]

GOOGLE_APPLICATION_CREDENTIALS = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")

# Fast passes (deskew probe, quick scan)
OCR_FAST_PSM = 3
OCR_FAST_OEM = 3

# Strict passes (heavy preprocessing ladder): uniform block of text, LSTM only
OCR_STRICT_PSM = 6
OCR_STRICT_OEM = 1
OCR_CHAR_WHITELIST = (
    "0123456789"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    ".,()-/:%<>=±μ"
)

# =============================================================================
# TIMEOUTS / RETRIES / CONCURRENCY
# =============================================================================
# Whole-request deadline (seconds)
EXTRACTION_TIMEOUT_SECONDS = _env_float("EXTRACTION_TIMEOUT_SECONDS", 180.0)

# Per-call timeouts for external capabilities (seconds)
OCR_CALL_TIMEOUT_SECONDS = _env_float("OCR_CALL_TIMEOUT_SECONDS", 60.0)
AI_CALL_TIMEOUT_SECONDS = _env_float("AI_CALL_TIMEOUT_SECONDS", 90.0)

# One retry per external call, exponential backoff between attempts
EXTERNAL_CALL_RETRIES = _env_int("EXTERNAL_CALL_RETRIES", 1)
RETRY_BACKOFF_MIN_SECONDS = 0.5
RETRY_BACKOFF_MAX_SECONDS = 4.0

# Worker pool for rotation probes and preprocessing variants
OCR_MAX_WORKERS = _env_int("OCR_MAX_WORKERS", os.cpu_count() or 2)

# How often a waiting fan-out re-checks cancellation / deadline
FAN_OUT_POLL_SECONDS = 0.1

# =============================================================================
# PRE-OCR PIPELINE
# =============================================================================
# Deskew: below this many characters the page is probed for rotation
DESKEW_MIN_TEXT_LENGTH = 50
DESKEW_ROTATIONS = (90, 180, 270)

# Quick scan
QUICK_SCAN_MAX_SIZE = 1500
QUICK_SCAN_ACCEPT_SCORE = 150.0
QUICK_SCAN_MIN_KEYWORDS = 3          # accepted only if hits > this

# Heavy ladder
VARIANT_CANVAS_SIZE = 3000

# High-contrast binarization variant
HIGH_CONTRAST_ALPHA = 1.4
HIGH_CONTRAST_BETA = -40.0
HIGH_CONTRAST_SHARPEN_SIGMA = 1.5
HIGH_CONTRAST_THRESHOLD = 120

# Adaptive local-contrast variant
CLAHE_TILE_PX = 64
CLAHE_CLIP_LIMIT = 3.0
CLAHE_GAMMA = 1.3
CLAHE_SHARPEN_SIGMA = 1.0

# Texts shorter than this (after strip) are "no usable text"
MIN_USABLE_TEXT_LENGTH = 10
NO_TEXT_SENTINEL = " "

# =============================================================================
# QUALITY SCORING
# =============================================================================
SCORE_CONTENT_CHAR_CAP = 100
SCORE_CONTENT_PER_CHAR = 0.5
SCORE_STRUCTURE_WEIGHT = 8.0
SCORE_MEDICAL_WEIGHT = 15.0
SCORE_UNIT_WEIGHT = 12.0
SCORE_CONFIDENCE_WEIGHT = 0.4

# =============================================================================
# PDF
# =============================================================================
# A text layer longer than this (after strip) is trusted without OCR
PDF_TEXT_LAYER_MIN_LENGTH = 100
PDF_RASTER_DPI = _env_int("PDF_RASTER_DPI", 300)
PDF_MAX_PAGES = _env_int("PDF_MAX_PAGES", 5)
POPPLER_PATH = os.getenv("POPPLER_PATH")

# =============================================================================
# AI EXTRACTOR (GEMINI)
# =============================================================================
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
AI_RESPONSE_SCHEMA_VERSION = "1"

# =============================================================================
# ORCHESTRATION DEFAULTS
# =============================================================================
PREFER_AI = _env_bool("PREFER_AI", True)
INCLUDE_INSIGHTS = _env_bool("INCLUDE_INSIGHTS", True)

SUPPORTED_MIME_TYPES = ("application/pdf", "image/png", "image/jpeg")


# =============================================================================
# CONFIG CHECK
# =============================================================================
def validate_config():
    """Checks that the configured engine and vocabulary are usable."""
    errors = []

    if OCR_ENGINE not in ("tesseract", "google_vision"):
        errors.append(f"OCR_ENGINE must be 'tesseract' or 'google_vision', got: {OCR_ENGINE}")

    if OCR_ENGINE == "google_vision":
        if not GOOGLE_APPLICATION_CREDENTIALS:
            errors.append(
                "GOOGLE_APPLICATION_CREDENTIALS is not set!\n"
                "Point it at a service account JSON key to use the Google Vision engine."
            )
        elif not Path(GOOGLE_APPLICATION_CREDENTIALS).exists():
            errors.append(f"Credentials file not found: {GOOGLE_APPLICATION_CREDENTIALS}")

    if not MEDICAL_VOCABULARY_FILE.exists():
        errors.append(f"Medical vocabulary file not found: {MEDICAL_VOCABULARY_FILE}")

    if OCR_MAX_WORKERS < 1:
        errors.append(f"OCR_MAX_WORKERS must be >= 1, got: {OCR_MAX_WORKERS}")

    if errors:
        raise ValueError("\n".join(errors))

    return True
