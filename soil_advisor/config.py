from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .core.acquisition.acquisition_config import DeviceProfile, SettingsError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _default_env_file() -> str:
    return str(Path.cwd() / ".env")


@dataclass(frozen=True)
class Settings:
    device: DeviceProfile
    rules_file: Optional[Path]
    log_level: str

    def device_profile(self) -> DeviceProfile:
        return self.device


def get_settings() -> Settings:
    """Raises SettingsError if a SOIL_* variable has an invalid value."""
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("SOIL_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    rules_file = os.getenv("SOIL_RULES_FILE") or None
    log_level = os.getenv("SOIL_LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise SettingsError(f"SOIL_LOG_LEVEL={log_level!r} is not one of {LOG_LEVELS}")

    return Settings(
        device=DeviceProfile.from_env(),
        rules_file=Path(rules_file) if rules_file else None,
        log_level=log_level,
    )
