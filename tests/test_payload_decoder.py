"""Tests del decodificador de payload.

Tests obligatorios:
1. Mapeo moisture/EC → SensorReading
2. Longitud estricta (== 2)
3. Contenido inválido nunca se corrige en silencio

Ejecutar:
    pytest tests/test_payload_decoder.py -v
"""

import pytest

from soil_advisor.core.domain import InvalidPayload, RawPacket, SensorReading
from soil_advisor.core.validation import decode, parse_packet


# =============================================================================
# TEST 1: MAPEO
# =============================================================================

class TestDecodeMapping:
    """Verifica la proyección de los 2 bytes en la lectura."""

    def test_concrete_payload(self):
        """[42, 17] produce la lectura documentada."""
        reading = decode(bytes([42, 17]))

        assert reading == SensorReading(
            ph=0, moisture=42, tds=17, nitrogen=17, phosphorus=17, potassium=17,
        )

    @pytest.mark.parametrize("moisture,ec", [(0, 0), (255, 255), (100, 0), (7, 200)])
    def test_ec_replicated_into_tds_and_npk(self, moisture, ec):
        """EC se replica en TDS/N/P/K y pH queda en 0."""
        reading = decode([moisture, ec])

        assert reading.moisture == moisture
        assert reading.tds == reading.nitrogen == reading.phosphorus == reading.potassium == ec
        assert reading.ph == 0

    @pytest.mark.parametrize("buffer", [b"\x2a\x11", bytearray(b"\x2a\x11"), memoryview(b"\x2a\x11"), [42, 17], (42, 17)])
    def test_accepts_buffer_types(self, buffer):
        """bytes, bytearray, memoryview y secuencias de int."""
        assert decode(buffer).moisture == 42

    def test_deterministic(self):
        assert decode(b"\x10\x20") == decode(b"\x10\x20")

    def test_reading_is_immutable(self):
        reading = decode(b"\x10\x20")

        with pytest.raises(AttributeError):
            reading.moisture = 99

    def test_out_of_nominal_range_is_not_rejected(self):
        """Bytes > 100 son válidos en el wire; solo se marca el paquete."""
        packet = parse_packet(b"\xc8\x05")

        assert packet == RawPacket(moisture=200, ec=5)
        assert packet.within_nominal_range is False
        assert decode(b"\xc8\x05").moisture == 200

    def test_nominal_range_edges(self):
        assert RawPacket(0, 100).within_nominal_range is True
        assert RawPacket(101, 0).within_nominal_range is False


# =============================================================================
# TEST 2: LONGITUD ESTRICTA
# =============================================================================

class TestDecodeLength:
    """Cualquier longitud distinta de 2 falla."""

    @pytest.mark.parametrize("buffer", [b"", b"\x01", b"\x01\x02\x03", b"\x00" * 20])
    def test_wrong_length_rejected(self, buffer):
        with pytest.raises(InvalidPayload) as exc:
            decode(buffer)

        assert exc.value.length == len(buffer)
        assert "2 bytes" in str(exc.value)

    def test_length_three_rejected(self):
        """Un payload de 3 bytes no se trunca."""
        with pytest.raises(InvalidPayload):
            decode([42, 17, 0])


# =============================================================================
# TEST 3: CONTENIDO INVÁLIDO
# =============================================================================

class TestDecodeContent:
    """Contenido no representable como uint8."""

    def test_value_above_255(self):
        with pytest.raises(InvalidPayload) as exc:
            decode([300, 1])

        assert exc.value.content is not None

    def test_negative_value(self):
        with pytest.raises(InvalidPayload):
            decode([-1, 1])

    def test_non_integer_items(self):
        with pytest.raises(InvalidPayload):
            decode([1.5, 2])

    def test_bare_int_is_not_a_buffer(self):
        """bytes(2) sería b'\\x00\\x00'; no debe aceptarse."""
        with pytest.raises(InvalidPayload):
            decode(2)

    def test_string_rejected(self):
        with pytest.raises(InvalidPayload):
            decode("ab")

    def test_invalid_payload_is_not_recoverable(self):
        assert InvalidPayload.recoverable is False


# =============================================================================
# TEST 4: LECTURA CONSTRUIDA A MANO
# =============================================================================

class TestSensorReadingValues:
    """Una lectura no finita no llega al motor de reglas."""

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    @pytest.mark.parametrize("field", ["ph", "moisture", "nitrogen", "potassium"])
    def test_non_finite_rejected(self, field, bad):
        values = dict(ph=6.5, moisture=40, tds=10, nitrogen=60, phosphorus=40, potassium=60)
        values[field] = bad

        with pytest.raises(ValueError, match=field):
            SensorReading(**values)

    def test_finite_values_accepted(self):
        reading = SensorReading(ph=6.5, moisture=40, tds=10, nitrogen=60, phosphorus=40, potassium=60)

        assert reading.to_dict()["ph"] == 6.5
