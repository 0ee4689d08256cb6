"""AcquisitionSession - Estado transitorio de una llamada a acquire().

Mantiene la conexión, la característica, la suscripción y el timer, y
garantiza:
- una sola resolución de la carrera notify/timeout (latch)
- teardown en todas las salidas, sin enmascarar el error principal
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from ..transport.base import PeripheralConnection, Subscription

logger = logging.getLogger(__name__)


class _TimedOut:
    def __repr__(self) -> str:
        return "TIMED_OUT"


# Resultado centinela cuando el timer gana la carrera
TIMED_OUT = _TimedOut()


class AcquisitionSession:
    """Sesión de adquisición usada como async context manager.

    Uso:
        async with AcquisitionSession(connection) as session:
            ...
            session.start_timer(6.0)
            outcome = await session.wait()
    """

    def __init__(self, connection: PeripheralConnection):
        self.connection = connection
        self.characteristic: Any = None
        self.subscription: Optional[Subscription] = None

        self._outcome: asyncio.Future = asyncio.get_running_loop().create_future()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._settled = False
        self._closed = False

    @property
    def settled(self) -> bool:
        return self._settled

    @property
    def closed(self) -> bool:
        return self._closed

    def settle(self, value: Any = None, error: Optional[BaseException] = None) -> bool:
        """Resuelve la sesión si nadie lo hizo antes.

        Returns:
            True si esta llamada ganó el latch, False si llegó tarde
        """
        if self._settled:
            return False
        self._settled = True
        if error is not None:
            self._outcome.set_exception(error)
        else:
            self._outcome.set_result(value)
        return True

    def start_timer(self, timeout_s: float) -> None:
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(timeout_s, self._on_timeout)

    def _on_timeout(self) -> None:
        self._timer = None
        if self.settle(TIMED_OUT):
            logger.info("[ACQ] Timer won the race")

    async def wait(self) -> Any:
        """Espera el primer resultado (lectura, TIMED_OUT o excepción)."""
        return await self._outcome

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def release_subscription(self) -> None:
        """Desregistra el handler de notificaciones si sigue activo."""
        self._cancel_timer()
        subscription = self.subscription
        if subscription is None or not subscription.active:
            return
        try:
            await subscription.cancel()
        except Exception as e:
            logger.warning("[ACQ] Failed to cancel subscription: %s", e)

    async def close(self) -> None:
        """Teardown idempotente.

        Los errores se registran y se ignoran: nunca reemplazan el
        resultado de la operación.
        """
        if self._closed:
            return
        self._closed = True
        # Callbacks tardíos a partir de aquí no tienen efecto
        self._settled = True
        await self.release_subscription()

        try:
            if self.connection.is_connected:
                await self.connection.disconnect()
        except Exception as e:
            logger.warning("[ACQ] Disconnect during teardown failed: %s", e)

        if not self._outcome.done():
            self._outcome.cancel()

    async def __aenter__(self) -> "AcquisitionSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.close()
        return False
