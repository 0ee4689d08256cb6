"""Transporte BLE basado en bleak."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from bleak import BleakClient, BleakScanner
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.device import BLEDevice
from bleak.exc import BleakBluetoothNotAvailableError, BleakDBusError, BleakError

from ..domain.errors import PlatformUnsupported
from .base import NotifyCallback, PeripheralConnection, PeripheralTransport, Subscription

logger = logging.getLogger(__name__)

# BlueZ no está corriendo en el bus del sistema
DBUS_SERVICE_UNKNOWN = "org.freedesktop.DBus.Error.ServiceUnknown"


class BleakSubscription(Subscription):
    """Suscripción GATT; `cancel()` llama a stop_notify una sola vez."""

    def __init__(self, client: BleakClient, characteristic: BleakGATTCharacteristic):
        self._client = client
        self._characteristic = characteristic
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    async def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        # Tras una desconexión el backend ya liberó la suscripción
        if self._client.is_connected:
            await self._client.stop_notify(self._characteristic)
            logger.debug("[BLE] Notifications stopped on %s", self._characteristic.uuid)


class BleakConnection(PeripheralConnection):
    """Conexión GATT con un único periférico.

    Responsabilidades:
    - Conexión/desconexión
    - Descubrimiento de servicio y característica
    - Suscripción y lectura
    """

    def __init__(self, device: BLEDevice):
        self._device = device
        self._client = BleakClient(device, disconnected_callback=self._on_disconnect)

    @property
    def name(self) -> Optional[str]:
        return self._device.name

    @property
    def is_connected(self) -> bool:
        return self._client.is_connected

    async def connect(self) -> None:
        logger.info("[BLE] Connecting to %s (%s)", self._device.name, self._device.address)
        await self._client.connect()
        logger.info("[BLE] GATT connected")

    async def discover(self, service_id: str, characteristic_id: str) -> BleakGATTCharacteristic:
        service = self._client.services.get_service(service_id)
        if service is None:
            raise BleakError(f"Service {service_id} not found on {self._device.address}")
        characteristic = service.get_characteristic(characteristic_id)
        if characteristic is None:
            raise BleakError(f"Characteristic {characteristic_id} not found in service {service_id}")
        return characteristic

    async def subscribe(
        self,
        characteristic: BleakGATTCharacteristic,
        callback: NotifyCallback,
    ) -> Subscription:
        def _handler(sender: BleakGATTCharacteristic, data: bytearray) -> None:
            callback(bytes(data))

        await self._client.start_notify(characteristic, _handler)
        logger.info("[BLE] Notifications started, waiting for 1 packet")
        return BleakSubscription(self._client, characteristic)

    async def read(self, characteristic: BleakGATTCharacteristic) -> bytes:
        return bytes(await self._client.read_gatt_char(characteristic))

    async def disconnect(self) -> None:
        await self._client.disconnect()
        logger.info("[BLE] Disconnected")

    def _on_disconnect(self, client: BleakClient) -> None:
        logger.debug("[BLE] Link closed by %s", self._device.address)


class BleakTransport(PeripheralTransport):
    """Transporte BLE del host.

    No hay selector interactivo: el "picker" es un escaneo acotado por
    nombre. Si el escaneo termina sin coincidencias equivale a que el
    usuario no eligió dispositivo.
    """

    def __init__(self):
        self._scans = 0
        self._devices_found = 0

    @property
    def transport_name(self) -> str:
        return "ble"

    @property
    def stats(self) -> Dict[str, Any]:
        return {"scans": self._scans, "devices_found": self._devices_found}

    async def ensure_supported(self) -> None:
        # bleak resuelve el backend de la plataforma al construir el scanner
        try:
            BleakScanner()
        except BleakError as e:
            raise PlatformUnsupported(f"Bluetooth LE not supported on this host: {e}") from e

    async def request_device(
        self,
        name_filter: str,
        service_id: str,
        timeout_s: float,
    ) -> Optional[PeripheralConnection]:
        logger.info("[BLE] Requesting device name=%s (scan %.1fs)", name_filter, timeout_s)
        self._scans += 1
        try:
            device = await BleakScanner.find_device_by_name(name_filter, timeout=timeout_s)
        except BleakBluetoothNotAvailableError as e:
            raise PlatformUnsupported(f"Bluetooth LE not available: {e}") from e
        except BleakDBusError as e:
            if e.dbus_error != DBUS_SERVICE_UNKNOWN:
                raise
            raise PlatformUnsupported(f"BlueZ service not running: {e}") from e
        except FileNotFoundError as e:
            # Sin socket de D-Bus del sistema
            raise PlatformUnsupported(f"No system D-Bus socket: {e}") from e
        if device is None:
            logger.warning("[BLE] No device named %s found", name_filter)
            return None

        self._devices_found += 1
        logger.info("[BLE] Selected device: %s (%s)", device.name, device.address)
        return BleakConnection(device)
