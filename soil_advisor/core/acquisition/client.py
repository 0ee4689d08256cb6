"""Cliente de adquisición de un único snapshot del sensor de suelo.

Flujo:
    ensure_supported → request_device → connect → discover → subscribe
    → carrera {notify, timeout} → [resultado | lectura de respaldo]
    → teardown

No hay reintentos internos: cualquier fallo aborta la llamada después
del teardown y el llamador decide si repetir.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Dict, Optional

from ..domain.errors import (
    AcquisitionError,
    AcquisitionTimeout,
    DeviceNotSelected,
    InvalidPayload,
    TransportError,
)
from ..domain.reading import SensorReading
from ..transport.base import PeripheralTransport
from ..transport.ble_transport import BleakTransport
from ..validation.payload_decoder import parse_packet
from .acquisition_config import (
    DEFAULT_CHARACTERISTIC_UUID,
    DEFAULT_DEVICE_NAME,
    DEFAULT_SERVICE_UUID,
    DEFAULT_TIMEOUT_MS,
    DeviceProfile,
    TimeoutStrategy,
)
from .session import TIMED_OUT, AcquisitionSession

logger = logging.getLogger(__name__)


class SnapshotAcquisitionClient:
    """Orquesta una adquisición single-shot sobre un PeripheralTransport.

    Responsabilidades:
    - Secuencia de etapas con TransportError por etapa
    - Carrera notify/timeout con resolución única
    - Lectura de respaldo opcional (TimeoutStrategy)
    - Teardown garantizado vía AcquisitionSession
    """

    def __init__(self, transport: PeripheralTransport, profile: Optional[DeviceProfile] = None):
        self._transport = transport
        self._profile = profile or DeviceProfile()

        # Metrics
        self._notify_hits = 0
        self._fallback_reads = 0
        self._failures = 0

    @property
    def profile(self) -> DeviceProfile:
        return self._profile

    @property
    def stats(self) -> Dict[str, Any]:
        return {
            "transport": self._transport.transport_name,
            "notify_hits": self._notify_hits,
            "fallback_reads": self._fallback_reads,
            "failures": self._failures,
        }

    async def acquire(self, timeout_ms: Optional[int] = None) -> SensorReading:
        """Adquiere y decodifica exactamente un snapshot.

        Args:
            timeout_ms: Espera máxima de la notificación (default del perfil)

        Returns:
            SensorReading decodificado

        Raises:
            PlatformUnsupported, DeviceNotSelected, TransportError,
            AcquisitionTimeout, InvalidPayload
        """
        timeout_ms = self._profile.timeout_ms if timeout_ms is None else timeout_ms
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")

        try:
            return await self._acquire(timeout_ms)
        except AcquisitionError as e:
            self._failures += 1
            logger.error("[ACQ] Acquisition failed: %s", e)
            raise

    async def _acquire(self, timeout_ms: int) -> SensorReading:
        profile = self._profile
        await self._transport.ensure_supported()

        connection = await self._stage(
            "request",
            self._transport.request_device(
                profile.name_filter, profile.service_uuid, profile.scan_timeout_s,
            ),
        )
        if connection is None:
            raise DeviceNotSelected(profile.name_filter)

        async with AcquisitionSession(connection) as session:
            await self._stage("connect", connection.connect())
            session.characteristic = await self._stage(
                "discover",
                connection.discover(profile.service_uuid, profile.characteristic_uuid),
            )
            session.subscription = await self._stage(
                "subscribe",
                connection.subscribe(
                    session.characteristic,
                    lambda data: self._on_notify(session, data),
                ),
            )

            session.start_timer(timeout_ms / 1000.0)
            outcome = await session.wait()
            await session.release_subscription()

            if outcome is not TIMED_OUT:
                self._notify_hits += 1
                return outcome

            return await self._fallback_read(session, timeout_ms)

    async def _stage(self, stage: str, awaitable: Awaitable[Any]) -> Any:
        try:
            return await awaitable
        except AcquisitionError:
            raise
        except Exception as e:
            raise TransportError(stage, e) from e

    def _on_notify(self, session: AcquisitionSession, data: bytes) -> None:
        if session.settled:
            logger.debug("[ACQ] Ignoring late notification (%d bytes)", len(data))
            return
        try:
            reading = self._decode(data, "notify")
        except InvalidPayload as e:
            session.settle(error=e)
            return
        session.settle(reading)

    async def _fallback_read(self, session: AcquisitionSession, timeout_ms: int) -> SensorReading:
        if self._profile.timeout_strategy is TimeoutStrategy.FAIL:
            raise AcquisitionTimeout(timeout_ms)

        logger.warning("[ACQ] No notify received in %d ms, trying fallback read", timeout_ms)
        self._fallback_reads += 1
        try:
            data = await session.connection.read(session.characteristic)
        except Exception as e:
            raise AcquisitionTimeout(timeout_ms, cause=e) from e
        return self._decode(data, "read")

    def _decode(self, data: bytes, source: str) -> SensorReading:
        packet = parse_packet(data)
        logger.info("[ACQ] %s packet: moisture=%d ec=%d", source, packet.moisture, packet.ec)
        if not packet.within_nominal_range:
            logger.warning(
                "[ACQ] %s packet outside nominal 0-100 range: moisture=%d ec=%d",
                source, packet.moisture, packet.ec,
            )
        return packet.to_reading()


async def acquire(
    name_filter: str = DEFAULT_DEVICE_NAME,
    service_uuid: str = DEFAULT_SERVICE_UUID,
    characteristic_uuid: str = DEFAULT_CHARACTERISTIC_UUID,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    *,
    transport: Optional[PeripheralTransport] = None,
    timeout_strategy: TimeoutStrategy = TimeoutStrategy.FALLBACK_READ,
) -> SensorReading:
    """Atajo funcional: construye perfil y cliente y adquiere un snapshot."""
    if transport is None:
        transport = BleakTransport()

    profile = DeviceProfile(
        name_filter=name_filter,
        service_uuid=service_uuid,
        characteristic_uuid=characteristic_uuid,
        timeout_ms=timeout_ms,
        timeout_strategy=timeout_strategy,
    )
    return await SnapshotAcquisitionClient(transport, profile).acquire()
