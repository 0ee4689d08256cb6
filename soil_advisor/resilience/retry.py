"""Retry con backoff exponencial para el llamador de acquire().

La adquisición no reintenta internamente; este ejecutor permite que el
llamador (la CLI) repita la llamada completa ante errores recuperables.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from ..core.domain.errors import AcquisitionTimeout, DeviceNotSelected, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RECOVERABLE_ERRORS: Tuple[Type[Exception], ...] = (
    DeviceNotSelected,
    TransportError,
    AcquisitionTimeout,
)


@dataclass
class RetryConfig:
    """Configuración para retry con backoff."""

    max_attempts: int = 3
    base_delay: float = 1.0  # segundos
    max_delay: float = 10.0  # segundos
    exponential_base: float = 2.0
    jitter: bool = True  # Añadir variación aleatoria
    retryable_exceptions: Tuple[Type[Exception], ...] = RECOVERABLE_ERRORS

    def calculate_delay(self, attempt: int) -> float:
        """Calcula el delay para un intento dado.

        Args:
            attempt: Número de intento (1-indexed)

        Returns:
            Delay en segundos
        """
        delay = self.base_delay * (self.exponential_base ** (attempt - 1))
        delay = min(delay, self.max_delay)

        if self.jitter:
            # Añadir jitter de ±25%
            jitter_range = delay * 0.25
            delay += random.uniform(-jitter_range, jitter_range)

        return max(0, delay)


class AsyncRetryExecutor:
    """Ejecutor de corrutinas con retry.

    Uso:
        executor = AsyncRetryExecutor(RetryConfig(max_attempts=3))
        reading = await executor.execute(client.acquire)
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        on_retry: Optional[Callable[[int, Exception], None]] = None,
    ):
        self._config = config or RetryConfig()
        self._on_retry = on_retry
        self._total_attempts = 0
        self._total_retries = 0
        self._total_failures = 0

    @property
    def stats(self) -> dict:
        """Estadísticas del ejecutor."""
        return {
            "total_attempts": self._total_attempts,
            "total_retries": self._total_retries,
            "total_failures": self._total_failures,
        }

    async def execute(
        self,
        func: Callable[..., Awaitable[T]],
        *args,
        **kwargs,
    ) -> T:
        """Ejecuta `func(*args, **kwargs)` con retry.

        Raises:
            La última excepción si se agotan los reintentos, o cualquier
            excepción no reintentable de inmediato
        """
        for attempt in range(1, self._config.max_attempts + 1):
            self._total_attempts += 1

            try:
                return await func(*args, **kwargs)

            except self._config.retryable_exceptions as e:
                if attempt == self._config.max_attempts:
                    self._total_failures += 1
                    logger.error(
                        "RETRY_EXHAUSTED func=%s attempts=%d err=%s",
                        getattr(func, "__name__", func), attempt, e,
                    )
                    raise

                self._total_retries += 1
                delay = self._config.calculate_delay(attempt)
                logger.warning(
                    "RETRY func=%s attempt=%d/%d delay=%.2fs err=%s",
                    getattr(func, "__name__", func), attempt, self._config.max_attempts, delay, e,
                )
                if self._on_retry:
                    self._on_retry(attempt, e)
                await asyncio.sleep(delay)

        raise RuntimeError("Retry loop completed without result")
