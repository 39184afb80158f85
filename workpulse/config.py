import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

DB_PATH = os.getenv("WORKPULSE_DB_PATH", str(BASE_DIR / "data" / "workpulse.db"))
HOST = os.getenv("WORKPULSE_HOST", "127.0.0.1")
PORT = int(os.getenv("WORKPULSE_PORT", "8000"))
LOG_LEVEL = os.getenv("WORKPULSE_LOG_LEVEL", "INFO").upper()

# Timer defaults
TARGET_FOCUS_MINUTES = int(os.getenv("WORKPULSE_TARGET_FOCUS_MINUTES", "25"))
TARGET_MODE_ENABLED = os.getenv("WORKPULSE_TARGET_MODE_ENABLED", "false").lower() in ("1", "true", "yes")
DEFAULT_BREAK_TYPE = os.getenv("WORKPULSE_DEFAULT_BREAK_TYPE", "rest")
DEFAULT_TASK_NAME = os.getenv("WORKPULSE_DEFAULT_TASK_NAME", "Untitled task")
TICK_INTERVAL_SECONDS = float(os.getenv("WORKPULSE_TICK_INTERVAL_SECONDS", "1.0"))

# Ambient audio
AMBIENT_AUDIO_PATH = os.getenv("WORKPULSE_AMBIENT_AUDIO_PATH", str(BASE_DIR / "assets" / "pink_noise.wav"))
AMBIENT_VOLUME = float(os.getenv("WORKPULSE_AMBIENT_VOLUME", "0.5"))
AUTOPLAY_AMBIENT = os.getenv("WORKPULSE_AUTOPLAY_AMBIENT", "true").lower() in ("1", "true", "yes")

# Alert texts
ALERT_TITLE = os.getenv("WORKPULSE_ALERT_TITLE", "Focus time is over")
ALERT_BODY = os.getenv("WORKPULSE_ALERT_BODY", "Your {minutes}-minute focus block is done, take a break!")
ALERT_RESUME_BODY = os.getenv("WORKPULSE_ALERT_RESUME_BODY", "Your focus time is up, take a break!")
SPOKEN_ANNOUNCEMENT = os.getenv(
    "WORKPULSE_SPOKEN_ANNOUNCEMENT", "Focus time is over. Please stand up and move around!"
)

# Calculated values
SECONDS_PER_MINUTE = 60
