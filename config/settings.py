"""Global configuration management using pydantic-settings.

This module implements the 12-factor app methodology for configuration,
loading values from environment variables with strict type validation.
Every timing constant and locator chain used by the engine lives here so
that tests and operators can override it without touching code.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DIALOG_PRIMARY = (
    "/html/body/div[4]/div/div[2]/div[6]/div/div[2]/div[1]/div/main/section"
    "/div/div[2]/div[3]/div[3]/div/dialog/div/div[1]/div[2]/div/div[1]"
)
_DIALOG_FALLBACK = (
    '//*[@id="main-view"]/div/div[2]/div[1]/div/main/section'
    "/div/div[2]/div[3]/div[2]/div/dialog/div/div[1]/div/div/div[1]"
)
_DIALOG_FALLBACK_ABSOLUTE = (
    "/html/body/div[4]/div/div[2]/div[6]/div/div[2]/div[1]/div/main/section"
    "/div/div[2]/div[3]/div[2]/div/dialog/div/div[1]/div/div/div[1]"
)
_HEADER_PRIMARY = (
    "/html/body/div[4]/div/div[2]/div[6]/div/div[2]/div[1]/div/main/section"
    "/div/div[2]/div[3]/div[2]/div/dialog/div/div[1]/div/div/div[2]"
)


class GlobalConfig(BaseSettings):
    """Centralized configuration with environment variable binding.

    All configuration values are loaded from environment variables,
    with defaults matching the artist profile pages the engine targets.
    List-valued settings (locator chains) are read from JSON in the
    environment, e.g. ``ACTIVATION_LOCATORS='["//button"]'``.

    Attributes:
        app_name: Application identifier for logging.
        environment: Deployment environment.
        debug: Enable verbose tracebacks in log output.
        headless: Launch the browser without a visible window.
        log_level: Minimum log level for output filtering.
        log_dir: Directory path for structured JSON log files.
        log_rotation: Log file rotation interval.
        log_retention: Log file retention period.
        output_dir: Directory for exported batch results.
        target_base_url: URL prefix a target identifier is appended to.
        user_agent: Fixed identity string sent by the browser.
        viewport_width: Fixed viewport width in pixels.
        viewport_height: Fixed viewport height in pixels.
        navigation_timeout_ms: Hard timeout for a single navigation.
        navigation_wait_until: Playwright load state that ends navigation.
        settle_delay_ms: Wait after navigation for client-side rendering.
        inspection_pause_ms: Extra wait after navigation in diagnostic mode.
        activation_max_attempts: Attempts per activation locator.
        activation_retry_delay_ms: Delay between activation attempts.
        post_activation_settle_ms: Wait for the dialog after activation.
        pacing_delay_ms: Delay applied after every target.
        city_count: Number of city entries extracted per artist.
        city_start_index: First positional index of the city rows.
        default_*: Values substituted when a field cannot be extracted.
        *_locators: Ordered locator chains, first match wins.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Metadata
    app_name: str = Field(default="ArtistPulse", description="Application identifier")
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development", description="Deployment environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Browser Configuration
    headless: bool = Field(default=True, description="Run browser in headless mode")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        min_length=1,
        description="Fixed browser identity string",
    )
    viewport_width: int = Field(default=1280, ge=320, le=3840, description="Viewport width")
    viewport_height: int = Field(default=720, ge=240, le=2160, description="Viewport height")

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Minimum log level"
    )
    log_dir: Path = Field(default=Path("logs"), description="Log output directory")
    log_rotation: str = Field(default="1 week", description="Log rotation interval")
    log_retention: str = Field(default="1 month", description="Log retention period")

    # Output Configuration
    output_dir: Path = Field(default=Path("output"), description="Export output directory")

    # Target Configuration
    target_base_url: str = Field(
        default="https://open.spotify.com/artist/",
        description="URL prefix for target identifiers",
    )

    # Timing Parameters
    navigation_timeout_ms: int = Field(
        default=30000, ge=1000, le=120000, description="Navigation timeout in milliseconds"
    )
    navigation_wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="networkidle", description="Load state that completes navigation"
    )
    settle_delay_ms: int = Field(
        default=3000, ge=0, le=60000, description="Settle delay after navigation"
    )
    inspection_pause_ms: int = Field(
        default=5000, ge=0, le=600000, description="Diagnostic pause after navigation"
    )
    activation_max_attempts: int = Field(
        default=2, ge=1, le=10, description="Attempts per activation locator"
    )
    activation_retry_delay_ms: int = Field(
        default=1000, ge=0, le=30000, description="Delay between activation attempts"
    )
    post_activation_settle_ms: int = Field(
        default=5000, ge=0, le=60000, description="Settle delay after activation"
    )
    pacing_delay_ms: int = Field(
        default=2000, ge=0, le=60000, description="Delay between targets"
    )

    # Grouped Fields
    city_count: int = Field(default=5, ge=1, le=50, description="City entries per artist")
    city_start_index: int = Field(default=3, ge=1, description="First city row index")

    # Field Defaults
    default_artist_name: str = Field(default="Unknown Artist")
    default_image_src: str = Field(default="No image found")
    default_username: str = Field(default="No username found")
    default_social_link: str = Field(default="No social link found")
    default_count: int = Field(default=0, ge=0)
    default_city_label: str = Field(default="Unknown")

    # Locator Chains (XPath expressions, tried in order)
    activation_locators: list[str] = Field(
        default=[
            '//*[@id="main-view"]/div/div[2]/div[1]/div/main/section/div/div[2]/div[3]/div[3]/div/div/button',
            '//*[@id="main-view"]/div/div[2]/div[1]/div/main/section/div/div[2]/div[3]/div[2]/div/div/button',
        ],
        description="Audience insights button",
    )
    artist_name_locators: list[str] = Field(
        default=[
            f"{_HEADER_PRIMARY}/div[2]/div",
            '//div[@data-encore-id="text" and contains(text(), "Posted By")]',
        ]
    )
    image_locators: list[str] = Field(
        default=[
            f"{_HEADER_PRIMARY}/div[2]/figure/div/img",
            '//img[@class[contains(., "mMx2LUixlnN_Fu45JpFB")]]',
        ]
    )
    username_locators: list[str] = Field(
        default=[
            f"{_HEADER_PRIMARY}/div[1]/p",
            '//p[@data-encore-id="type" and starts-with(text(), "@")]',
        ]
    )
    followers_locators: list[str] = Field(
        default=[
            f"{_DIALOG_PRIMARY}/div[1]/div[1]",
            f"{_DIALOG_FALLBACK}/div[1]/div[1]",
        ]
    )
    monthly_listeners_locators: list[str] = Field(
        default=[
            f"{_DIALOG_PRIMARY}/div[2]/div[1]",
            f"{_DIALOG_FALLBACK_ABSOLUTE}/div[2]/div[1]",
        ]
    )
    city_label_locators: list[str] = Field(
        default=[
            f"{_DIALOG_PRIMARY}/div[{{index}}]/div[1]",
            f"{_DIALOG_FALLBACK}/div[{{index}}]/div[1]",
        ],
        description="City name row, '{index}' is substituted per row",
    )
    city_count_locators: list[str] = Field(
        default=[
            f"{_DIALOG_PRIMARY}/div[{{index}}]/div[2]",
            f"{_DIALOG_FALLBACK}/div[{{index}}]/div[2]",
        ],
        description="City listeners row, '{index}' is substituted per row",
    )
    social_link_locators: list[str] = Field(
        default=[
            f"{_DIALOG_FALLBACK}/div[8]/a",
            '//a[contains(@href, "instagram.com") or contains(@href, "facebook.com")]',
        ]
    )

    @field_validator("log_dir", "output_dir", mode="before")
    @classmethod
    def ensure_path(cls, value: str | Path) -> Path:
        """Convert string paths to Path objects."""
        return Path(value) if isinstance(value, str) else value

    @field_validator("target_base_url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Ensure target_base_url ends with a slash so identifiers append cleanly."""
        return value if value.endswith("/") else f"{value}/"

    @field_validator(
        "activation_locators",
        "artist_name_locators",
        "image_locators",
        "username_locators",
        "followers_locators",
        "monthly_listeners_locators",
        "city_label_locators",
        "city_count_locators",
        "social_link_locators",
    )
    @classmethod
    def validate_chain(cls, value: list[str]) -> list[str]:
        """Reject empty locator chains and blank entries."""
        cleaned = [entry.strip() for entry in value]
        if not cleaned or not all(cleaned):
            raise ValueError("Locator chain must contain at least one non-blank locator")
        return cleaned


@lru_cache(maxsize=1)
def get_config() -> GlobalConfig:
    """Retrieve the singleton GlobalConfig instance.

    Returns:
        GlobalConfig: The validated configuration instance.
    """
    return GlobalConfig()
