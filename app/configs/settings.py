"""Application settings and configuration constants.

This module contains application settings, constants, and configuration
values for the itinerary generation backend.
"""

from pathlib import Path

from google.genai.types import (
    GenerateContentConfig,
    HarmBlockThreshold,
    HarmCategory,
    SafetySetting,
)
from pydantic_settings.main import BaseSettings, SettingsConfigDict

ENV_FILE = Path(__file__).parent.parent.parent / ".env"

# --- Itinerary constants ---
MAX_TRIP_DAYS = 4
CHUNK_SIZE_DAYS = 2
MAX_ACTIVITIES_PER_DAY = 8
MIN_ACTIVITIES_PER_DAY = 1
MAX_ACTIVITY_MINUTES = 8 * 60
MAX_TIPS = 10

# Text length caps
MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 250
MAX_NOTES_LENGTH = 200
MAX_TIP_LENGTH = 200
MAX_INSIGHT_LENGTH = 200
MAX_SUGGESTION_DESCRIPTION_LENGTH = 200
MAX_PREFERENCE_LENGTH = 50

# Request defaults
DEFAULT_CITY = "Unknown City"
DEFAULT_COUNTRY = "Unknown Country"
DEFAULT_COORDINATES = (0.0, 0.0)
DEFAULT_BUDGET = 500.0
DEFAULT_CURRENCY = "USD"

ACTIVITY_TYPES = (
    "Cultural",
    "Local",
    "Relaxation",
    "Transport",
    "Dining",
    "Shopping",
    "Entertainment",
    "Sightseeing",
)

# AI Model Configuration
GEMINI_MODEL = "gemini-2.0-flash"

Harm = HarmCategory
Block = HarmBlockThreshold

# Safety settings for content generation
SAFETY_SETTINGS = [
    SafetySetting(
        category=Harm.HARM_CATEGORY_HARASSMENT,
        threshold=Block.BLOCK_MEDIUM_AND_ABOVE,
    ),
    SafetySetting(
        category=Harm.HARM_CATEGORY_HATE_SPEECH,
        threshold=Block.BLOCK_MEDIUM_AND_ABOVE,
    ),
    SafetySetting(
        category=Harm.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        threshold=Block.BLOCK_MEDIUM_AND_ABOVE,
    ),
    SafetySetting(
        category=Harm.HARM_CATEGORY_DANGEROUS_CONTENT,
        threshold=Block.BLOCK_MEDIUM_AND_ABOVE,
    ),
]

# Plain text in, plain text out; structure is imposed by the pipeline.
GENERATION_CONFIG = GenerateContentConfig(
    temperature=0.7,
    top_p=0.8,
    top_k=40,
    max_output_tokens=8192,
    safety_settings=SAFETY_SETTINGS,
)


class Settings(BaseSettings):
    """Application settings with validation and default values."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Itinerary Generation Backend"
    DEBUG: bool = False

    # AI Configuration
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = GEMINI_MODEL
    AI_REQUEST_TIMEOUT: float = 60.0  # seconds, per model call
    AI_MAX_RETRIES: int = 3
    AI_AUX_MAX_RETRIES: int = 2
    AI_RETRY_DELAY: float = 1.0  # seconds
    AI_BACKOFF_FACTOR: float = 2.0
    AI_MAX_RETRY_DELAY: float = 10.0  # seconds

    # Frontend
    PRODUCTION_FRONTEND_URL: str | None = None

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    LOG_FILE: str = "logs/app.log"


settings = Settings()
