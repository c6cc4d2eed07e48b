"""
Zentrale Konfiguration für die Olympics Schedule Pipeline
Basiert auf Pydantic Settings mit Environment Variable Support
"""

from typing import Any, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application Settings mit Environment Variable Support"""

    # Source pages
    schedule_url: str = "https://www.olympics.com/en/milano-cortina-2026/schedule"
    day_api_url_template: str = (
        "https://www.olympics.com/wmr-owg2026/schedules/api/ENG/schedule/lite/day/{date}"
    )

    # Rendering
    headless: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )
    locale: str = "en-US"
    viewport_width: int = 1280
    viewport_height: int = 900
    wait_until: str = "networkidle"
    navigation_timeout_ms: int = 60000
    overall_timeout_seconds: int = 240

    # Settle intervals (milliseconds) after UI interactions
    interaction_settle_ms: int = 600
    dismiss_settle_ms: int = 120
    network_settle_ms: int = 1200
    filter_settle_ms: int = 700

    # Nationality filter; empty target_noc disables the athlete feed
    target_noc: Optional[str] = "FIN"
    nationality_word: str = "finland"
    dom_hint_tokens: list[str] = ["finland"]
    filter_opener_selectors: list[str] = [
        'button[aria-label*="NOC" i]',
        'button[aria-label*="All NOCs" i]',
        'button[aria-label*="All Nations" i]',
        "div.css-1b0c4u2 button.css-c9900d",
        ".css-c9900d",
    ]

    # Extraction
    extraction_window_size: int = 1500
    team_participant_limit: int = 8

    # Cache (seconds); 0 disables
    cache_ttl_seconds: int = 0

    # Time handling
    source_timezone: str = "Europe/Rome"

    # Output
    public_dir: str = "./public"
    data_dir: str = "./data"

    # Monitoring
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "protected_namespaces": ("settings_",),
    }

    @field_validator("cache_ttl_seconds", mode="before")
    @classmethod
    def _clamp_ttl(cls, value: Any) -> int:
        # CACHE_TTL_SECONDS=abc or -5 disables caching instead of failing startup
        try:
            return max(0, int(value or 0))
        except (TypeError, ValueError):
            return 0

    @field_validator("target_noc", mode="before")
    @classmethod
    def _blank_noc(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip().upper()
        return value or None

    @property
    def nationality_enabled(self) -> bool:
        return bool(self.target_noc)

    @property
    def viewport(self) -> dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}


# Global Settings Instance
settings = Settings()
