"""Core module - Adquisición de un snapshot del sensor de suelo.

Estructura:
- domain/       → Modelos de dominio y taxonomía de errores
- validation/   → Decodificación estricta del payload de 2 bytes
- transport/    → Abstracción de transporte + implementación BLE (bleak)
- acquisition/  → Sesión (latch + teardown) y cliente de adquisición
"""
