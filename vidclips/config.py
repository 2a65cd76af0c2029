import os
import logging
import logging.config
from pathlib import Path

# Base Paths
PACKAGE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_DIR.parent

DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data"))).resolve()
CLIPS_DIR = DATA_DIR / "clips"
AUDIO_DIR = DATA_DIR / "audio"

# Logging Setup
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_FILE_PATH = os.getenv(
    "LOG_FILE_PATH",
    str((PROJECT_ROOT / "logs" / "vidclips.log").resolve()),
)

LOG_DIR = Path(LOG_FILE_PATH).parent
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": LOG_FORMAT,
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "filename": LOG_FILE_PATH,
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "encoding": "utf8",
        },
    },
    "loggers": {
        "vidclips": {
            "handlers": ["console", "file"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "uvicorn.error": {"level": "INFO"},
        "uvicorn.access": {"level": "INFO"},
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
}

logging.config.dictConfig(LOGGING_CONFIG)
logger = logging.getLogger("vidclips")

# Ensure directories exist
CLIPS_DIR.mkdir(parents=True, exist_ok=True)
AUDIO_DIR.mkdir(parents=True, exist_ok=True)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# External binaries
YT_DLP_PATH = os.getenv("YT_DLP_PATH", "yt-dlp")
FFMPEG_PATH = os.getenv("FFMPEG_PATH", "ffmpeg")

# Generative model tiers
GEMINI_PRIMARY_MODEL = os.getenv("GEMINI_PRIMARY_MODEL", "gemini-2.0-flash")
GEMINI_FALLBACK_MODEL = os.getenv("GEMINI_FALLBACK_MODEL", "gemini-1.5-flash")
GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "1.0"))

# Speech-to-text
DEEPGRAM_API_BASE = os.getenv("DEEPGRAM_API_BASE", "https://api.deepgram.com/v1")
DEEPGRAM_MODEL = os.getenv("DEEPGRAM_MODEL", "nova-2")
DEEPGRAM_TIMEOUT_SECONDS = float(os.getenv("DEEPGRAM_TIMEOUT_SECONDS", "300"))

# Local Whisper, used for whole-video transcripts; models download on first use
WHISPER_MODEL = os.getenv("WHISPER_MODEL", "tiny.en")
WHISPER_DEVICE = os.getenv("WHISPER_DEVICE", "cpu").strip().lower()
WHISPER_COMPUTE_TYPE = os.getenv("WHISPER_COMPUTE_TYPE", "int8")
WHISPER_LANGUAGE = os.getenv("WHISPER_LANGUAGE", "en").strip() or None
WHISPER_MODELS_DIR = Path(os.getenv("WHISPER_MODELS_DIR", str(DATA_DIR / "models"))).resolve()

# Credential keys
GEMINI_API_KEY_NAME = "GEMINI_API_KEY"
DEEPGRAM_API_KEY_NAME = "DEEPGRAM_API_KEY"

# Clip boundaries accepted from the model (seconds)
MIN_CLIP_SECONDS = 30
MAX_CLIP_SECONDS = 250

# Captions
CAPTION_MAX_WORDS = 5
CAPTION_FORCE_STYLE = (
    "FontName=Arial\\,Bold=-1\\,FontSize=24\\,PrimaryColour=&HFFFFFF\\,"
    "BorderStyle=3\\,Outline=2\\,OutlineColour=&H80000000\\,Shadow=1\\,"
    "MarginV=30\\,Alignment=2"
)

# Summary regeneration
SUMMARY_CONTEXT_SECONDS = 20
SUMMARY_MAX_CHARS = 260

# Progress milestones
PROGRESS_SUBMITTED = 20
PROGRESS_TRANSCRIPTION_STARTED = 10
PROGRESS_CLIP_DOWNLOADED = 25
PROGRESS_CLIP_AUDIO_EXTRACTED = 50
PROGRESS_CLIP_TRANSCRIBED = 75
PROGRESS_COMPLETE = 100

# Security / domains
CORS_ORIGINS = _split_csv(
    os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://localhost:8000",
    )
)

# Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
DEBUG = not IS_PRODUCTION
