"""Configuration management for EW Signer."""

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORTAL_URL = "https://extensions.sketchup.com/extension/sign"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="EW_SIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Portal Configuration
    portal_url: str = Field(DEFAULT_PORTAL_URL, description="Extension Warehouse signing page")

    # Browser Configuration
    browser_headless: bool = Field(False, description="Run browser in headless mode")
    browser_slow_mo: int = Field(10, description="Delay applied to every browser operation in ms")
    timeout_ms: int = Field(60000, description="Per-step timeout in milliseconds")
    processing_timeout_ms: Optional[int] = Field(
        None, description="Timeout for server-side signing in ms (defaults to timeout_ms)"
    )
    upload_settle_delay: float = Field(
        10.0, description="Seconds to wait before opening the file chooser"
    )

    # Application Configuration
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")


class RunConfig(BaseModel):
    """Immutable configuration of a single signing run."""

    model_config = ConfigDict(frozen=True)

    source_dir: Path = Field(..., description="Folder holding the extension loader and its folder")
    output: Optional[Path] = Field(None, description="Custom path of the signed archive")
    portal_url: str = Field(DEFAULT_PORTAL_URL, description="Signing page URL")
    headless: bool = Field(False, description="Run browser in headless mode")
    slow_mo: int = Field(10, ge=0, description="Browser slow motion in ms")
    timeout_ms: int = Field(60000, gt=0, description="Per-step timeout in ms")
    processing_timeout_ms: Optional[int] = Field(None, gt=0, description="Signing wait timeout in ms")
    settle_delay: float = Field(10.0, ge=0, description="Settle delay before the file chooser in s")

    @property
    def effective_processing_timeout_ms(self) -> int:
        return self.processing_timeout_ms or self.timeout_ms

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "RunConfig":
        """Build a run configuration from settings, letting non-None overrides win."""
        values = {
            "portal_url": settings.portal_url,
            "headless": settings.browser_headless,
            "slow_mo": settings.browser_slow_mo,
            "timeout_ms": settings.timeout_ms,
            "processing_timeout_ms": settings.processing_timeout_ms,
            "settle_delay": settings.upload_settle_delay,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
