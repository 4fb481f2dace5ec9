"""
TexOCR Configuration Module
Loads settings from .env file and defines pipeline defaults.
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path
from dotenv import find_dotenv, load_dotenv

# Load environment variables from the .env file in the working directory
load_dotenv(find_dotenv(usecwd=True))

# =============================================================================
# API Keys
# =============================================================================
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")
PUSHOVER_USER_KEY = os.getenv("PUSHOVER_USER_KEY", "")
PUSHOVER_API_TOKEN = os.getenv("PUSHOVER_API_TOKEN", "")

# =============================================================================
# Model Configuration
# =============================================================================
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# =============================================================================
# Pipeline Parameters
# =============================================================================
MAX_ATTEMPTS = int(os.getenv("MAX_ATTEMPTS", "3"))  # Counted attempts per page
QUOTA_DELAY_SECONDS = float(os.getenv("QUOTA_DELAY_SECONDS", "20"))  # When the API gives no retry delay
DPI = int(os.getenv("DPI", "300"))  # Resolution for PDF to image conversion
KEEP_IMAGES = os.getenv("KEEP_IMAGES", "false").lower() == "true"

# =============================================================================
# Document Metadata (used for the main.tex preamble)
# =============================================================================
DOC_TITLE = os.getenv("DOC_TITLE", "")
DOC_AUTHOR = os.getenv("DOC_AUTHOR", "")

# =============================================================================
# Paths
# =============================================================================
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", "output"))


@dataclass
class PipelineConfig:
    """Settings handed to the pipeline at construction time."""
    api_key: str = ""
    model: str = "gemini-2.5-flash"
    output_dir: Path = field(default_factory=lambda: Path("output"))
    dpi: int = 300
    max_attempts: int = 3
    default_quota_delay: float = 20.0
    keep_images: bool = False
    title: str = ""
    author: str = ""
    pushover_user_key: str = ""
    pushover_api_token: str = ""

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build a config from the module-level environment values."""
        return cls(
            api_key=GEMINI_API_KEY,
            model=GEMINI_MODEL,
            output_dir=OUTPUT_DIR,
            dpi=DPI,
            max_attempts=MAX_ATTEMPTS,
            default_quota_delay=QUOTA_DELAY_SECONDS,
            keep_images=KEEP_IMAGES,
            title=DOC_TITLE,
            author=DOC_AUTHOR,
            pushover_user_key=PUSHOVER_USER_KEY,
            pushover_api_token=PUSHOVER_API_TOKEN,
        )

    @property
    def image_dir(self) -> Path:
        return self.output_dir / "images"

    @property
    def notifications_enabled(self) -> bool:
        return bool(self.pushover_user_key and self.pushover_api_token)


# =============================================================================
# Validation
# =============================================================================
def validate_config(config: Optional[PipelineConfig] = None) -> dict:
    """Validate configuration and return status."""
    config = config or PipelineConfig.from_env()
    issues = []
    warnings = []

    if not config.api_key:
        issues.append("GEMINI_API_KEY is not set in .env file")

    if config.max_attempts < 1:
        issues.append("MAX_ATTEMPTS must be at least 1")

    if config.dpi < 72:
        issues.append("DPI must be at least 72")

    if not config.notifications_enabled:
        warnings.append("Pushover credentials not set, failure notifications are disabled")

    return {
        "valid": len(issues) == 0,
        "issues": issues,
        "warnings": warnings,
        "config": {
            "model": config.model,
            "output_dir": str(config.output_dir),
            "max_attempts": config.max_attempts,
            "quota_delay": config.default_quota_delay,
            "dpi": config.dpi,
        }
    }
