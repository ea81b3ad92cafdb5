import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./therapist_scheduler.db")

# Google Geocoding API
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")
GEOCODING_BASE_URL = os.getenv(
    "GEOCODING_BASE_URL", "https://maps.googleapis.com/maps/api/geocode/json"
)
GEOCODING_TIMEOUT_SECONDS = float(os.getenv("GEOCODING_TIMEOUT_SECONDS", "10"))
# Pause between provider calls during batch resolution (provider rate limits)
GEOCODE_BATCH_DELAY_MS = int(os.getenv("GEOCODE_BATCH_DELAY_MS", "100"))
GEOCODE_CACHE_SECONDS = int(os.getenv("GEOCODE_CACHE_SECONDS", "86400"))
GEOCODING_RPM = int(os.getenv("GEOCODING_RPM", "60"))

# Lead supervisor table (therapist id -> lead), shipped as data
LEAD_ASSIGNMENTS_FILE = os.getenv(
    "LEAD_ASSIGNMENTS_FILE", str(Path(__file__).resolve().parent / "data" / "lead_assignments.json")
)

# Optional shared bearer token; when unset any bearer token identifies the caller
SCHEDULER_API_TOKEN = os.getenv("SCHEDULER_API_TOKEN")

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000")


class SchedulerSettings(BaseModel):
    """Settings handed to the resolver and the scheduling engine at construction."""

    geocoding_api_key: Optional[str] = None
    geocoding_base_url: str = GEOCODING_BASE_URL
    geocoding_timeout_seconds: float = 10.0
    batch_delay_seconds: float = 0.1
    geocode_cache_seconds: int = 86400
    lead_assignments_file: Optional[str] = None
    api_token: Optional[str] = None

    @classmethod
    def from_env(cls) -> "SchedulerSettings":
        return cls(
            geocoding_api_key=GOOGLE_MAPS_API_KEY,
            geocoding_base_url=GEOCODING_BASE_URL,
            geocoding_timeout_seconds=GEOCODING_TIMEOUT_SECONDS,
            batch_delay_seconds=GEOCODE_BATCH_DELAY_MS / 1000.0,
            geocode_cache_seconds=GEOCODE_CACHE_SECONDS,
            lead_assignments_file=LEAD_ASSIGNMENTS_FILE,
            api_token=SCHEDULER_API_TOKEN,
        )


@lru_cache
def get_settings() -> SchedulerSettings:
    """FastAPI dependency returning the process-wide settings"""
    return SchedulerSettings.from_env()
