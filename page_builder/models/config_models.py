"""
Config Models for Page Builder
===============================

Read-only configuration surface consumed by the layout engine and the
editor coordinators. Delays are in seconds.
"""

import os
import logging
from typing import Dict
from pydantic import BaseModel, Field

from .page_models import Breakpoint

logger = logging.getLogger(__name__)

DEFAULT_BREAKPOINTS: Dict[Breakpoint, int] = {
    Breakpoint.DESKTOP: 1200,
    Breakpoint.TABLET: 768,
    Breakpoint.MOBILE: 375,
}


class PageBuilderConfig(BaseModel):
    """Configuration for the page editor."""
    # Pixel grid used for snapping and first-fit placement
    grid_size: int = Field(default=50, gt=0)
    # Cell grid used for marquee hit-testing
    grid_columns: int = Field(default=24, gt=0)
    grid_row_height: int = Field(default=8, gt=0)

    breakpoints: Dict[Breakpoint, int] = Field(
        default_factory=lambda: dict(DEFAULT_BREAKPOINTS)
    )

    default_canvas_height: int = 800
    default_section_height: int = 600
    max_section_width: int = 1200

    auto_save_delay: float = 3.0  # <= 0 disables auto-save
    max_history_size: int = Field(default=50, ge=1)
    persist_history: bool = False
    history_persist_delay: float = 0.25

    def canvas_width(self, breakpoint: Breakpoint) -> int:
        """Canvas width in px for a breakpoint."""
        return self.breakpoints.get(
            Breakpoint(breakpoint), DEFAULT_BREAKPOINTS[Breakpoint(breakpoint)]
        )

    @classmethod
    def from_env(cls) -> "PageBuilderConfig":
        """Build a config from PAGE_BUILDER_* environment variables."""
        env_map = {
            "grid_size": "PAGE_BUILDER_GRID_SIZE",
            "grid_columns": "PAGE_BUILDER_GRID_COLUMNS",
            "grid_row_height": "PAGE_BUILDER_GRID_ROW_HEIGHT",
            "default_section_height": "PAGE_BUILDER_SECTION_HEIGHT",
            "max_section_width": "PAGE_BUILDER_MAX_SECTION_WIDTH",
            "auto_save_delay": "PAGE_BUILDER_AUTO_SAVE_DELAY",
            "max_history_size": "PAGE_BUILDER_MAX_HISTORY",
            "persist_history": "PAGE_BUILDER_PERSIST_HISTORY",
        }
        values = {}
        for field_name, env_name in env_map.items():
            raw = os.getenv(env_name)
            if raw is not None and raw != "":
                values[field_name] = raw
        config = cls.model_validate(values)
        logger.info(f"[CONFIG] Loaded config overrides: {sorted(values)}")
        return config
