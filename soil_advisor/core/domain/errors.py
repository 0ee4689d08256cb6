"""Taxonomía de errores de la adquisición.

Ninguno se reintenta internamente: `recoverable` indica al llamador si
tiene sentido repetir `acquire()` completo.
"""

from __future__ import annotations

from typing import Optional


class AcquisitionError(Exception):
    """Base de todos los fallos de `acquire()`."""

    recoverable: bool = False


class PlatformUnsupported(AcquisitionError):
    """El host no puede emparejarse con periféricos BLE."""

    recoverable = False


class DeviceNotSelected(AcquisitionError):
    """El usuario abortó el selector o el escaneo no encontró dispositivo."""

    recoverable = True

    def __init__(self, name_filter: str):
        self.name_filter = name_filter
        super().__init__(f"No device selected matching name '{name_filter}'")


class TransportError(AcquisitionError):
    """Fallo del transporte en una etapa concreta (connect/discover/subscribe/read)."""

    recoverable = True

    def __init__(self, stage: str, cause: Optional[BaseException] = None):
        self.stage = stage
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Transport failed at stage '{stage}'{detail}")


class AcquisitionTimeout(AcquisitionError):
    """Ni la notificación ni la lectura de respaldo llegaron a tiempo."""

    recoverable = True

    def __init__(self, timeout_ms: int, cause: Optional[BaseException] = None):
        self.timeout_ms = timeout_ms
        self.cause = cause
        if cause is None:
            msg = f"No notification within {timeout_ms} ms"
        else:
            msg = f"No notification within {timeout_ms} ms and fallback read failed: {cause}"
        super().__init__(msg)


class InvalidPayload(AcquisitionError):
    """El payload viola el contrato de 2 bytes. Nunca se corrige en silencio."""

    recoverable = False

    def __init__(self, length: Optional[int] = None, content: Optional[str] = None):
        self.length = length
        self.content = content
        if content is not None:
            msg = f"Invalid payload content: {content}"
        else:
            msg = f"Expected 2 bytes (moisture, ec) but got {length}"
        super().__init__(msg)
