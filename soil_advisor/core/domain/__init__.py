"""Domain layer - Modelos y errores."""

from .reading import RawPacket, SensorReading
from .errors import (
    AcquisitionError,
    AcquisitionTimeout,
    DeviceNotSelected,
    InvalidPayload,
    PlatformUnsupported,
    TransportError,
)

__all__ = [
    "RawPacket",
    "SensorReading",
    "AcquisitionError",
    "AcquisitionTimeout",
    "DeviceNotSelected",
    "InvalidPayload",
    "PlatformUnsupported",
    "TransportError",
]
