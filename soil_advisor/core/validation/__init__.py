"""Validation layer - Decodificación del payload."""

from .payload_decoder import PAYLOAD_LENGTH, decode, parse_packet

__all__ = ["PAYLOAD_LENGTH", "decode", "parse_packet"]
