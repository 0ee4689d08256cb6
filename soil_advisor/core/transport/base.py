"""PeripheralTransport - Interface base para el transporte del periférico.

Define el contrato que debe implementar cualquier transporte (BLE real o
dobles de test) para que el cliente de adquisición pueda:
- verificar soporte de la plataforma
- seleccionar un dispositivo por nombre
- conectar, descubrir, suscribirse, leer y desconectar
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

# Recibe el valor crudo de cada notificación
NotifyCallback = Callable[[bytes], None]


class Subscription(ABC):
    """Handle cancelable de una suscripción a notificaciones.

    `cancel()` debe ser idempotente: después de la primera llamada el
    handler ya no recibe eventos.
    """

    @abstractmethod
    async def cancel(self) -> None:
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        pass


class PeripheralConnection(ABC):
    """Conexión con un periférico concreto.

    El recurso es propiedad exclusiva de la sesión de adquisición en curso.
    """

    @abstractmethod
    async def connect(self) -> None:
        pass

    @abstractmethod
    async def discover(self, service_id: str, characteristic_id: str) -> Any:
        """Localiza la característica dentro del servicio.

        Returns:
            Handle opaco de la característica, usado en subscribe/read

        Raises:
            Cualquier excepción si el servicio o la característica no existen
        """
        pass

    @abstractmethod
    async def subscribe(self, characteristic: Any, callback: NotifyCallback) -> Subscription:
        pass

    @abstractmethod
    async def read(self, characteristic: Any) -> bytes:
        """Lectura explícita (pull) del valor actual."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @property
    def name(self) -> Optional[str]:
        return None


class PeripheralTransport(ABC):
    """Interface común para transportes de periféricos de corto alcance."""

    @abstractmethod
    async def ensure_supported(self) -> None:
        """Falla rápido si el host no tiene capacidad de emparejamiento.

        Raises:
            PlatformUnsupported
        """
        pass

    @abstractmethod
    async def request_device(
        self,
        name_filter: str,
        service_id: str,
        timeout_s: float,
    ) -> Optional[PeripheralConnection]:
        """Selecciona un dispositivo que coincida con el filtro de nombre.

        Returns:
            Conexión (aún no conectada) o None si no se seleccionó ninguno
        """
        pass

    @property
    @abstractmethod
    def transport_name(self) -> str:
        pass

    @property
    def stats(self) -> Dict[str, Any]:
        return {}
