"""soil_advisor - Lectura única de sensor de suelo BLE y recomendación de cultivos.

Estructura:
- core/            → Adquisición del snapshot (dominio, decodificación, transporte BLE)
- classification/  → Bandas cualitativas por umbrales
- recommendation/  → Motor de reglas de cultivos y dosificación de fertilizantes
- resilience/      → Reintentos del lado del llamador
- catalog.py       → Enumeraciones compartidas (temporadas, clima, unidades)
- config.py        → Settings desde entorno / .env
- cli.py           → Punto de entrada de línea de comandos
"""

__version__ = "0.1.0"
