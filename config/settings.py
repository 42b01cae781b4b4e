"""
Firm/Case Matcher - Configuration

Loads settings from environment variables with sensible defaults.
"""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load .env file
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    @property
    def project_root(self) -> Path:
        """Return project root directory."""
        return PROJECT_ROOT

    # Application
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    LOG_TO_FILE: bool = Field(default=True)

    # Matching defaults (per-call controls override these)
    MATCH_THRESHOLD: float = Field(default=0.82)
    STRICT_LAST_NAME: bool = Field(default=True)
    ONLY_COURT_FILTER: bool = Field(default=True)
    COURT_PATTERN: str = Field(default=r"oslo\s+tingrett")

    # Output caps
    MAX_HITS_PER_FIRM: int = Field(default=10)
    KEYWORD_DISPLAY_LIMIT: int = Field(default=100)

    # Approximate-string index (rapidfuzz)
    USE_APPROXIMATE_INDEX: bool = Field(default=True)

    # Read "Last, First" segments in name lists as a surname
    SURNAME_LAST_FIRST: bool = Field(default=True)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
