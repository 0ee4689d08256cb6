"""Dobles de transporte compartidos por los tests de adquisición."""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Sequence

import pytest

from soil_advisor.core.acquisition import DeviceProfile
from soil_advisor.core.domain import PlatformUnsupported
from soil_advisor.core.transport import PeripheralConnection, PeripheralTransport, Subscription


class FakeSubscription(Subscription):
    def __init__(self, error: Optional[Exception] = None):
        self._active = True
        self._error = error
        self.cancel_calls = 0

    @property
    def active(self) -> bool:
        return self._active

    async def cancel(self) -> None:
        self.cancel_calls += 1
        self._active = False
        if self._error is not None:
            raise self._error


class FakeConnection(PeripheralConnection):
    """Periférico simulado.

    Las notificaciones se programan con `loop.call_later` al suscribirse
    y solo llegan mientras la suscripción sigue activa, como en BLE real.
    """

    def __init__(
        self,
        notify_payloads: Sequence[bytes] = (),
        notify_delay: float = 0.0,
        read_payload: Optional[bytes] = None,
        read_error: Optional[Exception] = None,
        fail_stage: Optional[str] = None,
        disconnect_error: Optional[Exception] = None,
        cancel_error: Optional[Exception] = None,
    ):
        self.notify_payloads = list(notify_payloads)
        self.notify_delay = notify_delay
        self.read_payload = read_payload
        self.read_error = read_error
        self.fail_stage = fail_stage
        self.disconnect_error = disconnect_error
        self.cancel_error = cancel_error

        self.connected = False
        self.callback = None
        self.subscription: Optional[FakeSubscription] = None
        self.discovered: List[tuple] = []
        self.read_calls = 0
        self.disconnect_calls = 0

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def connect(self) -> None:
        if self.fail_stage == "connect":
            raise OSError("connection refused")
        self.connected = True

    async def discover(self, service_id: str, characteristic_id: str) -> Any:
        if self.fail_stage == "discover":
            raise LookupError(f"service {service_id} not found")
        self.discovered.append((service_id, characteristic_id))
        return "characteristic-handle"

    async def subscribe(self, characteristic: Any, callback) -> Subscription:
        if self.fail_stage == "subscribe":
            raise OSError("notifications not permitted")
        self.callback = callback
        self.subscription = FakeSubscription(self.cancel_error)
        loop = asyncio.get_running_loop()
        for payload in self.notify_payloads:
            loop.call_later(self.notify_delay, self._deliver, payload)
        return self.subscription

    def _deliver(self, payload: bytes) -> None:
        if self.subscription is not None and self.subscription.active:
            self.callback(payload)

    def deliver_stale(self, payload: bytes) -> None:
        """Invoca el handler sin pasar por la suscripción (callback tardío)."""
        self.callback(payload)

    async def read(self, characteristic: Any) -> bytes:
        self.read_calls += 1
        if self.read_error is not None:
            raise self.read_error
        return self.read_payload

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False
        if self.disconnect_error is not None:
            raise self.disconnect_error


class FakeTransport(PeripheralTransport):
    def __init__(self, connection: Optional[FakeConnection] = None, supported: bool = True):
        self.connection = connection
        self.supported = supported
        self.requests: List[str] = []

    @property
    def transport_name(self) -> str:
        return "fake"

    async def ensure_supported(self) -> None:
        if not self.supported:
            raise PlatformUnsupported("no BLE adapter")

    async def request_device(self, name_filter: str, service_id: str, timeout_s: float):
        self.requests.append(name_filter)
        return self.connection


@pytest.fixture
def fast_profile() -> DeviceProfile:
    """Perfil con timeout corto para que los tests no esperen 6 s."""
    return DeviceProfile(timeout_ms=50, scan_timeout_s=0.1)


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Evita que un .env del directorio de trabajo afecte a los tests."""
    monkeypatch.setenv("SOIL_ENV_FILE", str(tmp_path / "missing.env"))
    for name in (
        "SOIL_DEVICE_NAME",
        "SOIL_SERVICE_UUID",
        "SOIL_CHARACTERISTIC_UUID",
        "SOIL_TIMEOUT_MS",
        "SOIL_SCAN_TIMEOUT_S",
        "SOIL_FALLBACK_ON_TIMEOUT",
        "SOIL_RULES_FILE",
        "SOIL_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return tmp_path
