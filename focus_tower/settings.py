"""Runtime settings for focusd and focusctl.

Every value can come from the environment (FOCUSD_TIMESLICE_MS=50) or a
.env file; command-line arguments override them.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from focus_tower.resources.cgroups import DEFAULT_CGROUP_ROOT
from focus_tower.tickets.store import DEFAULT_STATE_DIR, DEFAULT_TICKETS_FILENAME
from focus_tower.types import (
    DEFAULT_BACKGROUND_WEIGHT,
    DEFAULT_FOCUS_WEIGHT,
    MAX_CPU_WEIGHT,
    MIN_CPU_WEIGHT,
)

if TYPE_CHECKING:
    from protocols import LoggerProtocol


class FocusSettings(BaseSettings):
    """Daemon and control tool configuration."""

    # =========================================================================
    # SCHEDULING
    # =========================================================================
    timeslice_ms: int = Field(default=100, gt=0)
    """Length of one lottery round in milliseconds."""

    seed: Optional[int] = None
    """Fixed seed for the lottery draw. Unset means seeded from the clock."""

    # =========================================================================
    # PARTITIONS
    # =========================================================================
    cgroup_root: Path = DEFAULT_CGROUP_ROOT
    focus_weight: int = Field(
        default=DEFAULT_FOCUS_WEIGHT, ge=MIN_CPU_WEIGHT, le=MAX_CPU_WEIGHT
    )
    background_weight: int = Field(
        default=DEFAULT_BACKGROUND_WEIGHT, ge=MIN_CPU_WEIGHT, le=MAX_CPU_WEIGHT
    )

    # =========================================================================
    # TICKET TABLE
    # =========================================================================
    state_dir: Path = DEFAULT_STATE_DIR
    tickets_filename: str = DEFAULT_TICKETS_FILENAME

    # =========================================================================
    # LOGGING
    # =========================================================================
    log_level: str = "INFO"
    json_logs: bool = True

    model_config = SettingsConfigDict(
        env_prefix="FOCUSD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def tickets_path(self) -> Path:
        """Full path of the ticket table file."""
        return self.state_dir / self.tickets_filename

    @model_validator(mode="after")
    def validate_weights(self) -> "FocusSettings":
        """Focus must outweigh background or the lottery has no effect."""
        if self.focus_weight <= self.background_weight:
            raise ValueError(
                f"focus_weight ({self.focus_weight}) must be greater than "
                f"background_weight ({self.background_weight})"
            )
        return self

    def log_status(self, logger: "LoggerProtocol") -> None:
        """Log the effective configuration using structured logging."""
        logger.info(
            "settings_loaded",
            timeslice_ms=self.timeslice_ms,
            seeded=self.seed is not None,
            cgroup_root=str(self.cgroup_root),
            focus_weight=self.focus_weight,
            background_weight=self.background_weight,
            tickets_path=str(self.tickets_path),
        )

