"""Acquisition layer - Protocolo single-shot con carrera notify/timeout."""

from .acquisition_config import DeviceProfile, SettingsError, TimeoutStrategy
from .session import TIMED_OUT, AcquisitionSession
from .client import SnapshotAcquisitionClient, acquire

__all__ = [
    "DeviceProfile",
    "SettingsError",
    "TimeoutStrategy",
    "TIMED_OUT",
    "AcquisitionSession",
    "SnapshotAcquisitionClient",
    "acquire",
]
