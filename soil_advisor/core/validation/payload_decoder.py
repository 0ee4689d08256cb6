"""Decodificador del payload BLE del sensor de suelo.

Formato (2 bytes, uint8 sin escalar):
    byte 0 → humedad
    byte 1 → valor derivado de EC

Se exige longitud exacta 2. Un payload más largo también se rechaza:
las variantes del firmware no coinciden y truncar ocultaría un cambio de
formato.
"""

from __future__ import annotations

from typing import Sequence, Union

from ..domain.errors import InvalidPayload
from ..domain.reading import RawPacket, SensorReading

PAYLOAD_LENGTH = 2

Buffer = Union[bytes, bytearray, memoryview, Sequence[int]]


def _to_bytes(buffer: Buffer) -> bytes:
    # bytes(int) crearía un buffer de ceros de esa longitud
    if isinstance(buffer, (int, str)):
        raise InvalidPayload(content=f"unsupported buffer type {type(buffer).__name__}")
    if isinstance(buffer, (bytes, bytearray, memoryview)):
        return bytes(buffer)
    try:
        return bytes(buffer)
    except ValueError as e:
        raise InvalidPayload(content=f"byte out of range 0-255 ({e})") from e
    except TypeError as e:
        raise InvalidPayload(content=f"non-integer item in buffer ({e})") from e


def parse_packet(buffer: Buffer) -> RawPacket:
    """Valida longitud y contenido y retorna el paquete crudo.

    Raises:
        InvalidPayload: longitud distinta de 2 o contenido no representable
    """
    data = _to_bytes(buffer)
    if len(data) != PAYLOAD_LENGTH:
        raise InvalidPayload(length=len(data))
    return RawPacket(moisture=data[0], ec=data[1])


def decode(buffer: Buffer) -> SensorReading:
    """Convierte el buffer de 2 bytes en un SensorReading.

    Función pura y determinista.
    """
    return parse_packet(buffer).to_reading()
