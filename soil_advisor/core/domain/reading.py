"""Modelo de dominio para lecturas del sensor de suelo."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields

# Rango con significado agronómico de cada byte (el wire admite 0-255)
NOMINAL_MIN = 0
NOMINAL_MAX = 100

# Placeholder hasta que el hardware tenga canal de pH
PH_PLACEHOLDER = 0.0


@dataclass(frozen=True)
class RawPacket:
    """Payload crudo del periférico: [moisture, ec].

    Ambos campos son uint8 sin escalar.
    """

    moisture: int
    ec: int

    @property
    def within_nominal_range(self) -> bool:
        """True si ambos bytes caen en el rango nominal [0, 100]."""
        return all(NOMINAL_MIN <= v <= NOMINAL_MAX for v in (self.moisture, self.ec))

    def to_reading(self) -> SensorReading:
        """Proyecta el canal EC en TDS/N/P/K (mismo valor en los cuatro).

        Simplificación conocida: hasta que existan canales dedicados,
        TDS, N, P y K replican EC y pH queda en el placeholder.
        """
        ec = float(self.ec)
        return SensorReading(
            ph=PH_PLACEHOLDER,
            moisture=float(self.moisture),
            tds=ec,
            nitrogen=ec,
            phosphorus=ec,
            potassium=ec,
        )


@dataclass(frozen=True)
class SensorReading:
    """Snapshot del sensor - modelo canónico de dominio.

    Es el único contrato que fluye entre la adquisición y el motor de
    reglas: BLE → decode → SensorReading → recomendación.
    """

    ph: float
    moisture: float
    tds: float
    nitrogen: float
    phosphorus: float
    potassium: float

    def __post_init__(self):
        # NaN pasaría cualquier límite de regla (las comparaciones dan False)
        for f in fields(self):
            if not math.isfinite(getattr(self, f.name)):
                raise ValueError(f"{f.name} must be a finite number, got {getattr(self, f.name)!r}")

    def to_dict(self) -> dict:
        return asdict(self)
