"""
Reactor Configuration

Runtime settings for the reactor, loadable from the environment.
"""

import logging
import os
from typing import Optional

from pydantic import BaseModel, field_validator


_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_FALSE_VALUES = ("0", "false", "no", "off")


class ReactorConfig(BaseModel):
    """
    Reactor settings.

    Attributes:
        report_unhandled_rejections: Log rejected futures nobody observed
            (only when no unhandled-rejection hook is registered)
        unhandled_rejection_log_level: Level used for that log record
        max_tasks: Upper bound on jobs a single run call may execute
            (None = unbounded)
    """

    report_unhandled_rejections: bool = True
    unhandled_rejection_log_level: str = "WARNING"
    max_tasks: Optional[int] = None

    @field_validator("unhandled_rejection_log_level")
    @classmethod
    def check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("max_tasks")
    @classmethod
    def check_max_tasks(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("max_tasks must be positive")
        return value

    @property
    def log_level(self) -> int:
        """Numeric logging level for unhandled rejection reports."""
        return getattr(logging, self.unhandled_rejection_log_level)

    @classmethod
    def from_env(cls) -> "ReactorConfig":
        """
        Build a config from ``PLEDGE_*`` environment variables.

        Recognized variables:
            PLEDGE_REPORT_UNHANDLED: "0"/"false"/"no"/"off" disables reports
            PLEDGE_UNHANDLED_LOG_LEVEL: logging level name
            PLEDGE_MAX_TASKS: positive integer task budget
        """
        values = {}

        report = os.environ.get('PLEDGE_REPORT_UNHANDLED')
        if report is not None:
            values['report_unhandled_rejections'] = report.strip().lower() not in _FALSE_VALUES

        level = os.environ.get('PLEDGE_UNHANDLED_LOG_LEVEL')
        if level:
            values['unhandled_rejection_log_level'] = level

        max_tasks = os.environ.get('PLEDGE_MAX_TASKS')
        if max_tasks:
            values['max_tasks'] = int(max_tasks)

        return cls(**values)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging for scripts using the library."""
    logging.basicConfig(
        level=level,
        format='[pledge %(process)d] %(levelname)s %(name)s: %(message)s'
    )
