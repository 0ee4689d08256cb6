"""Configuración inmutable de la adquisición.

Se pasa al cliente en la construcción; los tests usan perfiles con otros
identificadores sin tocar estado global.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

DEFAULT_DEVICE_NAME = "ESP32-SoilSensor"
DEFAULT_SERVICE_UUID = "4fafc201-1fb5-459e-8fcc-c5c9c331914b"
DEFAULT_CHARACTERISTIC_UUID = "beb5483e-36e1-4688-b7f5-ea07361b26a8"
DEFAULT_TIMEOUT_MS = 6000
DEFAULT_SCAN_TIMEOUT_S = 10.0


class SettingsError(ValueError):
    """Variable de entorno con un valor inválido."""


def _env_positive(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise SettingsError(f"{name}={raw!r} is not a valid {cast.__name__}") from None
    if not value > 0:
        raise SettingsError(f"{name} must be positive, got {raw!r}")
    return value


class TimeoutStrategy(str, Enum):
    """Qué hacer cuando vence el timer sin notificación."""
    FALLBACK_READ = "fallback_read"  # una lectura pull
    FAIL = "fail"


@dataclass(frozen=True)
class DeviceProfile:
    """Identidad del periférico y parámetros del protocolo single-shot."""
    name_filter: str = DEFAULT_DEVICE_NAME
    service_uuid: str = DEFAULT_SERVICE_UUID
    characteristic_uuid: str = DEFAULT_CHARACTERISTIC_UUID
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    scan_timeout_s: float = DEFAULT_SCAN_TIMEOUT_S
    timeout_strategy: TimeoutStrategy = TimeoutStrategy.FALLBACK_READ

    def __post_init__(self):
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")
        if self.scan_timeout_s <= 0:
            raise ValueError(f"scan_timeout_s must be positive, got {self.scan_timeout_s}")

    @property
    def fallback_on_timeout(self) -> bool:
        return self.timeout_strategy is TimeoutStrategy.FALLBACK_READ

    @classmethod
    def from_env(cls) -> "DeviceProfile":
        """Construye el perfil desde variables SOIL_*.

        Raises:
            SettingsError: valor no numérico o no positivo
        """
        fallback = os.getenv("SOIL_FALLBACK_ON_TIMEOUT", "true").lower() in ("true", "1", "yes")
        return cls(
            name_filter=os.getenv("SOIL_DEVICE_NAME", DEFAULT_DEVICE_NAME),
            service_uuid=os.getenv("SOIL_SERVICE_UUID", DEFAULT_SERVICE_UUID),
            characteristic_uuid=os.getenv("SOIL_CHARACTERISTIC_UUID", DEFAULT_CHARACTERISTIC_UUID),
            timeout_ms=_env_positive("SOIL_TIMEOUT_MS", DEFAULT_TIMEOUT_MS, int),
            scan_timeout_s=_env_positive("SOIL_SCAN_TIMEOUT_S", DEFAULT_SCAN_TIMEOUT_S, float),
            timeout_strategy=TimeoutStrategy.FALLBACK_READ if fallback else TimeoutStrategy.FAIL,
        )
