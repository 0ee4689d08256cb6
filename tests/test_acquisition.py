"""Tests del cliente de adquisición single-shot.

Tests obligatorios:
1. Notificación antes del timeout → sin lectura de respaldo
2. Sin notificación → una lectura de respaldo
3. Latch: una sola resolución
4. Teardown en todas las salidas (disconnect sii conectado, como máximo una vez)
5. Taxonomía de errores

Ejecutar:
    pytest tests/test_acquisition.py -v
"""

import asyncio
import logging
from dataclasses import replace

import pytest

from conftest import FakeConnection, FakeTransport
from soil_advisor.core.acquisition import (
    TIMED_OUT,
    AcquisitionSession,
    SnapshotAcquisitionClient,
    TimeoutStrategy,
    acquire,
)
from soil_advisor.core.domain import (
    AcquisitionTimeout,
    DeviceNotSelected,
    InvalidPayload,
    PlatformUnsupported,
    SensorReading,
    TransportError,
)
from soil_advisor.core.validation import decode


# =============================================================================
# TEST 1: NOTIFICACIÓN GANA
# =============================================================================

class TestNotifyPath:
    """La notificación llega antes que el timer."""

    @pytest.mark.asyncio
    async def test_notification_result_returned(self, fast_profile):
        conn = FakeConnection(notify_payloads=[b"\x2a\x11"], notify_delay=0.005, read_payload=b"\x01\x01")
        client = SnapshotAcquisitionClient(FakeTransport(conn), fast_profile)

        reading = await client.acquire()

        assert reading == decode(b"\x2a\x11")
        assert conn.read_calls == 0
        assert client.stats["notify_hits"] == 1
        assert client.stats["fallback_reads"] == 0

    @pytest.mark.asyncio
    async def test_uses_profile_identifiers(self, fast_profile):
        profile = replace(
            fast_profile,
            name_filter="Bench-Sensor",
            service_uuid="0000aaaa-0000-1000-8000-00805f9b34fb",
            characteristic_uuid="0000bbbb-0000-1000-8000-00805f9b34fb",
        )
        conn = FakeConnection(notify_payloads=[b"\x01\x02"])
        transport = FakeTransport(conn)

        await SnapshotAcquisitionClient(transport, profile).acquire()

        assert transport.requests == ["Bench-Sensor"]
        assert conn.discovered == [(profile.service_uuid, profile.characteristic_uuid)]

    @pytest.mark.asyncio
    async def test_subscription_cancelled_after_success(self, fast_profile):
        conn = FakeConnection(notify_payloads=[b"\x01\x02"])

        await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert conn.subscription.active is False
        assert conn.subscription.cancel_calls == 1

    @pytest.mark.asyncio
    async def test_module_level_acquire(self):
        conn = FakeConnection(notify_payloads=[b"\x05\x06"])

        reading = await acquire(timeout_ms=50, transport=FakeTransport(conn))

        assert reading.moisture == 5
        assert reading.potassium == 6


# =============================================================================
# TEST 2: TIMER GANA → LECTURA DE RESPALDO
# =============================================================================

class TestFallbackPath:
    """Sin notificación a tiempo."""

    @pytest.mark.asyncio
    async def test_fallback_read_once(self, fast_profile):
        conn = FakeConnection(read_payload=b"\x37\x0c")
        client = SnapshotAcquisitionClient(FakeTransport(conn), fast_profile)

        reading = await client.acquire()

        assert reading == decode(b"\x37\x0c")
        assert conn.read_calls == 1
        assert client.stats["fallback_reads"] == 1

    @pytest.mark.asyncio
    async def test_late_notification_is_ignored(self, fast_profile):
        """Una notificación posterior al timeout no altera el resultado."""
        conn = FakeConnection(notify_payloads=[b"\x63\x63"], notify_delay=0.2, read_payload=b"\x01\x02")

        reading = await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()
        await asyncio.sleep(0.25)

        assert reading.moisture == 1
        assert conn.read_calls == 1

    @pytest.mark.asyncio
    async def test_fallback_read_failure_is_timeout(self, fast_profile):
        read_error = OSError("GATT read failed")
        conn = FakeConnection(read_error=read_error)

        with pytest.raises(AcquisitionTimeout) as exc:
            await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert exc.value.cause is read_error
        assert exc.value.__cause__ is read_error
        assert exc.value.timeout_ms == 50

    @pytest.mark.asyncio
    async def test_fail_strategy_skips_fallback(self, fast_profile):
        profile = replace(fast_profile, timeout_strategy=TimeoutStrategy.FAIL)
        conn = FakeConnection(read_payload=b"\x01\x02")

        with pytest.raises(AcquisitionTimeout) as exc:
            await SnapshotAcquisitionClient(FakeTransport(conn), profile).acquire()

        assert exc.value.cause is None
        assert conn.read_calls == 0

    @pytest.mark.asyncio
    async def test_timeout_override_per_call(self, fast_profile):
        conn = FakeConnection(notify_payloads=[b"\x09\x09"], notify_delay=0.08, read_payload=b"\x01\x01")
        client = SnapshotAcquisitionClient(FakeTransport(conn), fast_profile)

        reading = await client.acquire(timeout_ms=500)

        assert reading.moisture == 9
        assert conn.read_calls == 0

    @pytest.mark.asyncio
    async def test_non_positive_timeout_rejected(self, fast_profile):
        client = SnapshotAcquisitionClient(FakeTransport(FakeConnection()), fast_profile)

        with pytest.raises(ValueError):
            await client.acquire(timeout_ms=0)


# =============================================================================
# TEST 3: LATCH
# =============================================================================

class TestSettleLatch:
    """Como máximo una resolución por sesión."""

    @pytest.mark.asyncio
    async def test_second_settle_loses(self):
        session = AcquisitionSession(FakeConnection())

        assert session.settle("first") is True
        assert session.settle("second") is False
        assert session.settle(error=RuntimeError("late")) is False
        assert await session.wait() == "first"

    @pytest.mark.asyncio
    async def test_timer_after_settle_is_inert(self):
        session = AcquisitionSession(FakeConnection())
        session.start_timer(0.01)
        session.settle("notify")

        await asyncio.sleep(0.03)

        assert await session.wait() == "notify"

    @pytest.mark.asyncio
    async def test_timer_resolves_with_sentinel(self):
        session = AcquisitionSession(FakeConnection())
        session.start_timer(0.01)

        assert await session.wait() is TIMED_OUT

    @pytest.mark.asyncio
    async def test_settle_after_close_is_ignored(self):
        session = AcquisitionSession(FakeConnection())
        await session.close()

        assert session.settle("stale") is False

    @pytest.mark.asyncio
    async def test_duplicate_notifications_resolve_once(self, fast_profile):
        conn = FakeConnection(notify_payloads=[b"\x0a\x0b", b"\x14\x15"], notify_delay=0.005)

        reading = await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert reading.moisture == 10

    @pytest.mark.asyncio
    async def test_notify_and_timer_due_together(self, fast_profile):
        """Ambos callbacks programados al mismo instante: un único resultado."""
        conn = FakeConnection(notify_payloads=[b"\x0a\x0b"], notify_delay=0.05, read_payload=b"\x14\x15")

        reading = await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()
        await asyncio.sleep(0.02)

        assert reading.moisture in (10, 20)
        assert conn.read_calls == (1 if reading.moisture == 20 else 0)
        assert conn.disconnect_calls == 1

    @pytest.mark.asyncio
    async def test_stale_callback_after_acquire_has_no_effect(self, fast_profile):
        conn = FakeConnection(read_payload=b"\x01\x02")
        client = SnapshotAcquisitionClient(FakeTransport(conn), fast_profile)
        reading = await client.acquire()

        conn.deliver_stale(b"\x63\x63")

        assert reading.moisture == 1
        assert client.stats["notify_hits"] == 0


# =============================================================================
# TEST 4: TEARDOWN
# =============================================================================

class TestTeardown:
    """disconnect() sii el transporte sigue conectado, como máximo una vez."""

    @pytest.mark.asyncio
    async def test_disconnect_after_success(self, fast_profile):
        conn = FakeConnection(notify_payloads=[b"\x01\x02"])

        await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert conn.disconnect_calls == 1
        assert conn.is_connected is False

    @pytest.mark.asyncio
    async def test_disconnect_after_timeout(self, fast_profile):
        profile = replace(fast_profile, timeout_strategy=TimeoutStrategy.FAIL)
        conn = FakeConnection()

        with pytest.raises(AcquisitionTimeout):
            await SnapshotAcquisitionClient(FakeTransport(conn), profile).acquire()

        assert conn.disconnect_calls == 1

    @pytest.mark.asyncio
    async def test_no_disconnect_when_connect_failed(self, fast_profile):
        conn = FakeConnection(fail_stage="connect")

        with pytest.raises(TransportError):
            await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert conn.disconnect_calls == 0

    @pytest.mark.asyncio
    async def test_disconnect_after_discover_failure(self, fast_profile):
        conn = FakeConnection(fail_stage="discover")

        with pytest.raises(TransportError):
            await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert conn.disconnect_calls == 1

    @pytest.mark.asyncio
    async def test_disconnect_after_invalid_payload(self, fast_profile):
        conn = FakeConnection(notify_payloads=[b"\x01\x02\x03"])

        with pytest.raises(InvalidPayload):
            await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert conn.disconnect_calls == 1
        assert conn.subscription.active is False

    @pytest.mark.asyncio
    async def test_disconnect_error_does_not_mask_result(self, fast_profile, caplog):
        conn = FakeConnection(notify_payloads=[b"\x2a\x11"], disconnect_error=OSError("already gone"))

        with caplog.at_level(logging.WARNING):
            reading = await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert reading.moisture == 42
        assert conn.disconnect_calls == 1
        assert "already gone" in caplog.text

    @pytest.mark.asyncio
    async def test_teardown_error_does_not_mask_primary_error(self, fast_profile):
        conn = FakeConnection(
            notify_payloads=[b"\x01"],
            disconnect_error=OSError("disconnect failed"),
            cancel_error=OSError("cancel failed"),
        )

        with pytest.raises(InvalidPayload):
            await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert conn.disconnect_calls == 1

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        conn = FakeConnection()
        conn.connected = True
        session = AcquisitionSession(conn)

        await session.close()
        await session.close()

        assert conn.disconnect_calls == 1
        assert session.closed is True


# =============================================================================
# TEST 5: TAXONOMÍA DE ERRORES
# =============================================================================

class TestErrors:
    """Cada etapa falla con su error tipado."""

    @pytest.mark.asyncio
    async def test_platform_unsupported_fails_fast(self, fast_profile):
        transport = FakeTransport(FakeConnection(), supported=False)

        with pytest.raises(PlatformUnsupported):
            await SnapshotAcquisitionClient(transport, fast_profile).acquire()

        assert transport.requests == []
        assert PlatformUnsupported.recoverable is False

    @pytest.mark.asyncio
    async def test_device_not_selected(self, fast_profile):
        client = SnapshotAcquisitionClient(FakeTransport(None), fast_profile)

        with pytest.raises(DeviceNotSelected) as exc:
            await client.acquire()

        assert exc.value.name_filter == "ESP32-SoilSensor"
        assert exc.value.recoverable is True
        assert client.stats["failures"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stage", ["connect", "discover", "subscribe"])
    async def test_transport_error_carries_stage(self, fast_profile, stage):
        conn = FakeConnection(fail_stage=stage)

        with pytest.raises(TransportError) as exc:
            await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert exc.value.stage == stage
        assert exc.value.cause is not None
        assert exc.value.__cause__ is exc.value.cause

    @pytest.mark.asyncio
    async def test_invalid_fallback_payload(self, fast_profile):
        conn = FakeConnection(read_payload=b"\x01")

        with pytest.raises(InvalidPayload) as exc:
            await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert exc.value.length == 1

    @pytest.mark.asyncio
    async def test_result_type(self, fast_profile):
        conn = FakeConnection(notify_payloads=[b"\x01\x02"])

        reading = await SnapshotAcquisitionClient(FakeTransport(conn), fast_profile).acquire()

        assert isinstance(reading, SensorReading)
