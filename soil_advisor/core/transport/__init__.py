"""Transport layer - Acceso al periférico de corto alcance."""

from .base import NotifyCallback, PeripheralConnection, PeripheralTransport, Subscription
from .ble_transport import BleakConnection, BleakSubscription, BleakTransport

__all__ = [
    "NotifyCallback",
    "PeripheralConnection",
    "PeripheralTransport",
    "Subscription",
    "BleakConnection",
    "BleakSubscription",
    "BleakTransport",
]
