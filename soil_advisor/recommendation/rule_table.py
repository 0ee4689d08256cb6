"""Tabla de reglas de cultivos: datos por defecto y carga validada.

Las reglas se evalúan en el orden declarado; la primera coincidencia
completa gana.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from ..catalog import DEFAULT_CATALOG, AgronomyCatalog
from .models import RuleTable, RuleTableError

logger = logging.getLogger(__name__)

# Mismo formato que la configuración de la app (claves camelCase).
# Caña de azúcar: el límite de fósforo venía escrito como `pMIn` y nunca
# se aplicaba; se deja sin límite de fósforo en lugar de adivinar el valor.
CROP_RULES: dict[str, Any] = {
    "rules": [
        {
            "crops": ["Wheat", "Maize", "Corn"],
            "cropsHi": ["गेहूं", "मक्का", "मकई"],
            "cropsGu": ["ઘઉં", "મકાઈ", "કોર્ન"],
            "conditions": {
                "pHMin": 6.0,
                "pHMax": 8.5,
                "nMin": 50,
                "pMin": 30,
                "kMin": 50,
                "dominantWeather": ["sunny", "cloudy"],
                "season": ["rabi", "kharif"],
            },
        },
        {
            "crops": ["Rice", "Paddy"],
            "cropsHi": ["धान", "चावल"],
            "cropsGu": ["ચોખા", "ડાંગર"],
            "conditions": {
                "pHMin": 5.5,
                "pHMax": 7.5,
                "moistureMin": 50,
                "nMin": 40,
                "pMin": 25,
                "kMin": 40,
                "dominantWeather": ["rainy", "humid"],
                "season": ["kharif"],
            },
        },
        {
            "crops": ["Chickpea", "Lentil", "Peas"],
            "cropsHi": ["चना", "दाल", "मटर"],
            "cropsGu": ["ચણા", "દાળ", "વટાણા"],
            "conditions": {
                "pHMin": 6.0,
                "pHMax": 8.0,
                "nMin": 20,
                "pMin": 25,
                "kMin": 25,
                "dominantWeather": ["cloudy", "windy", "sunny"],
                "season": ["rabi"],
            },
        },
        {
            "crops": ["Cotton", "Soybean"],
            "cropsHi": ["कपास", "सोयाबीन"],
            "cropsGu": ["કપાસ", "સોયાબીન"],
            "conditions": {
                "pHMin": 6.0,
                "pHMax": 8.0,
                "nMin": 45,
                "pMin": 30,
                "kMin": 45,
                "dominantWeather": ["sunny", "humid"],
                "season": ["kharif"],
            },
        },
        {
            "crops": ["Sugarcane"],
            "cropsHi": ["गन्ना"],
            "cropsGu": ["શેરડી"],
            "conditions": {
                "pHMin": 6.0,
                "pHMax": 8.5,
                "nMin": 65,
                "kMin": 65,
                "moistureMin": 50,
                "dominantWeather": ["sunny", "humid", "rainy"],
            },
        },
        {
            "crops": ["Potato", "Vegetables"],
            "cropsHi": ["आलू", "सब्जियां"],
            "cropsGu": ["બટાકા", "શાકભાજી"],
            "conditions": {
                "pHMin": 5.5,
                "pHMax": 7.0,
                "nMin": 40,
                "pMin": 35,
                "kMin": 40,
                "dominantWeather": ["cloudy", "sunny"],
                "season": ["rabi", "zaid"],
            },
        },
    ],
    "default": {
        "cropsEn": ["General Crops", "Vegetables"],
        "cropsHi": ["सामान्य फसलें", "सब्जियां"],
        "cropsGu": ["સામાન્ય પાક", "શાકભાજી"],
    },
}


def _check_catalog(table: RuleTable, catalog: AgronomyCatalog) -> None:
    seasons = set(catalog.season_values)
    weather = set(catalog.weather_values)
    for i, rule in enumerate(table.rules):
        cond = rule.conditions
        unknown_seasons = (cond.season or frozenset()) - seasons
        if unknown_seasons:
            raise RuleTableError(
                f"rules[{i}] ({rule.crops[0]}): unknown season(s) {sorted(unknown_seasons)}"
            )
        unknown_weather = (cond.weather or frozenset()) - weather
        if unknown_weather:
            raise RuleTableError(
                f"rules[{i}] ({rule.crops[0]}): unknown weather value(s) {sorted(unknown_weather)}"
            )


def load_rule_table(
    data: Mapping[str, Any],
    catalog: AgronomyCatalog = DEFAULT_CATALOG,
) -> RuleTable:
    """Valida la forma de la tabla y los valores contra el catálogo.

    Raises:
        RuleTableError: claves desconocidas, límites invertidos, listas
            vacías o temporadas/climas fuera del catálogo
    """
    try:
        table = RuleTable.model_validate(data)
    except ValidationError as e:
        raise RuleTableError(f"Invalid crop rule table: {e}") from e

    _check_catalog(table, catalog)
    logger.debug("[RULES] Loaded %d crop rules", len(table.rules))
    return table


def load_rule_table_file(
    path: Union[str, Path],
    catalog: AgronomyCatalog = DEFAULT_CATALOG,
) -> RuleTable:
    """Carga una tabla desde JSON con el mismo formato que CROP_RULES."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RuleTableError(f"Crop rule file {path} could not be read: {e}") from e
    except json.JSONDecodeError as e:
        raise RuleTableError(f"Crop rule file {path} is not valid JSON: {e}") from e
    logger.info("[RULES] Loading crop rules from %s", path)
    return load_rule_table(data, catalog)


DEFAULT_RULE_TABLE = load_rule_table(CROP_RULES)


def get_rule_table(
    path: Optional[Union[str, Path]] = None,
    catalog: AgronomyCatalog = DEFAULT_CATALOG,
) -> RuleTable:
    """Tabla desde archivo si se indica, si no la tabla por defecto."""
    if path is None:
        return DEFAULT_RULE_TABLE
    return load_rule_table_file(path, catalog)
