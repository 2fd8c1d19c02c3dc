# File: src/mep_autoavoid/config/settings.py
import os
import logging

from ..utils.logging_config import get_logger

logger = get_logger(__name__)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Settings:
    """Runtime settings loaded from environment variables"""

    def __init__(self):
        # Diagnostics output
        self.log_dir = os.environ.get("MEP_AUTOAVOID_LOG_DIR", "logs")
        self.log_to_file = _env_flag("MEP_AUTOAVOID_LOG_TO_FILE")
        self.log_to_console = _env_flag("MEP_AUTOAVOID_LOG_TO_CONSOLE")

        # Application settings
        self.debug = _env_flag("MEP_AUTOAVOID_DEBUG")

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.INFO

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls()
        if settings.debug:
            logger.debug(f"Debug diagnostics enabled, log dir: {settings.log_dir}")
        return settings
