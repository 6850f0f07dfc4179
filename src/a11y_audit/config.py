"""Configuration settings for the audit engine."""

from pydantic import Field
from pydantic_settings import BaseSettings


class AuditSettings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Keyboard and focus heuristics
    focus_order_tolerance: int = Field(
        default=200,
        description="Upward jump in pixels between consecutive focus stops treated as illogical order",
    )
    keyboard_trap_repeats: int = Field(
        default=3,
        description="Consecutive repeats of the same focused element treated as a trap",
    )
    max_tab_presses: int = Field(default=100, description="Tab presses simulated during capture")

    # Reflow / zoom
    reflow_width: int = Field(default=320, description="Viewport width used for the reflow check")
    reflow_height: int = Field(default=568, description="Viewport height used for the reflow check")
    reflow_tolerance: int = Field(
        default=10,
        description="Horizontal overflow in pixels tolerated before flagging",
    )

    # Geometry
    min_target_size: int = Field(default=24, description="Minimum target width/height in pixels")

    # Contrast thresholds
    text_contrast_minimum: float = Field(default=4.5, description="Contrast for normal text")
    large_text_contrast_minimum: float = Field(default=3.0, description="Contrast for large text")
    non_text_contrast_minimum: float = Field(default=3.0, description="Contrast for UI components")

    # Runs
    max_concurrent_pages: int = Field(default=4, description="Pages audited in parallel")
    default_level: str | None = Field(
        default=None,
        description="Conformance level filter applied when a run does not pass one (A, AA or unset)",
    )

    model_config = {"env_prefix": "A11Y_", "env_file": ".env"}


settings = AuditSettings()
