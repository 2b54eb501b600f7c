from __future__ import annotations

import math
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

MAX_CUSTOM_FIELDS = 3

HOUR_FIELDS = (
    "flight_time_hours",
    "day_dual",
    "day_pic",
    "day_sic",
    "day_cmnd_practice",
    "night_dual",
    "night_pic",
    "night_sic",
    "night_cmnd_practice",
    "instrument_hours",
    "simulated_instrument_hours",
    "ground_instrument_hours",
)


class AircraftCategory(str, Enum):
    HELICOPTER = "Helicopter"
    AEROPLANE = "Aeroplane"
    SIMULATOR = "Simulator"


class EngineType(str, Enum):
    SINGLE_ENGINE = "Single Engine"
    MULTI_ENGINE = "Multi Engine"


_CATEGORY_SPELLINGS = {
    "helicopter": AircraftCategory.HELICOPTER.value,
    "aeroplane": AircraftCategory.AEROPLANE.value,
    "airplane": AircraftCategory.AEROPLANE.value,
    "simulator": AircraftCategory.SIMULATOR.value,
}

_ENGINE_SPELLINGS = {
    "singleengine": EngineType.SINGLE_ENGINE.value,
    "se": EngineType.SINGLE_ENGINE.value,
    "multiengine": EngineType.MULTI_ENGINE.value,
    "me": EngineType.MULTI_ENGINE.value,
}


def parse_hours(value: Any) -> Optional[float]:
    """Lenient hours parser: numbers or numeric strings; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        parsed = float(value)
        return None if math.isnan(parsed) or math.isinf(parsed) else parsed
    text = str(value).strip().replace(",", ".")
    if not text:
        return None
    try:
        parsed = float(text)
    except ValueError:
        return None
    return None if math.isnan(parsed) or math.isinf(parsed) else parsed


def parse_flight_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text[:10]).date()
    except ValueError:
        pass
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%d/%m/%Y", "%d.%m.%Y", "%m/%d/%Y"):
        try:
            return datetime.strptime(text[:10], fmt).date()
        except ValueError:
            continue
    return None


def _spelling_key(value: str) -> str:
    return re.sub(r"[^a-z]", "", value.lower())


class CustomFieldDefinition(BaseModel):
    """User-defined hours column (e.g. "NVG", "Hoist")."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    label: str = Field(default="", validation_alias=AliasChoices("label", "field_label", "fieldLabel"))

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> str:
        if value is None:
            raise ValueError("custom field id is required")
        return str(value).strip()

    @field_validator("label", mode="before")
    @classmethod
    def _normalize_label(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()


class FlightRecord(BaseModel):
    """
    One logbook row, as supplied by the data layer (oldest first).

    The dual/pic/sic/command-practice hours are recorded once per flight; the
    engine type decides whether they count as single-engine or multi-engine
    time. Numeric fields are optional and are read as 0 when absent.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    flight_date: Optional[date] = Field(default=None, validation_alias=AliasChoices("flight_date", "date"))
    aircraft_type: str = ""
    registration: str = ""
    pilot_in_command: str = Field(default="", validation_alias=AliasChoices("pilot_in_command", "pilot", "pic_name"))
    copilot_student: str = Field(default="", validation_alias=AliasChoices("copilot_student", "copilot", "student"))
    flight_details: str = Field(default="", validation_alias=AliasChoices("flight_details", "details"))
    aircraft_category: str = AircraftCategory.HELICOPTER.value
    engine_type: str = EngineType.SINGLE_ENGINE.value

    flight_time_hours: Optional[float] = None
    day_dual: Optional[float] = None
    day_pic: Optional[float] = None
    day_sic: Optional[float] = None
    day_cmnd_practice: Optional[float] = None
    night_dual: Optional[float] = None
    night_pic: Optional[float] = None
    night_sic: Optional[float] = None
    night_cmnd_practice: Optional[float] = None
    instrument_hours: Optional[float] = None
    simulated_instrument_hours: Optional[float] = None
    ground_instrument_hours: Optional[float] = None

    custom_field_values: Dict[str, float] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("custom_field_values", "customFieldValues"),
    )

    @field_validator("flight_date", mode="before")
    @classmethod
    def _lenient_date(cls, value: Any) -> Optional[date]:
        return parse_flight_date(value)

    @field_validator(
        "aircraft_type",
        "registration",
        "pilot_in_command",
        "copilot_student",
        "flight_details",
        mode="before",
    )
    @classmethod
    def _text_or_blank(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("aircraft_category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            return AircraftCategory.HELICOPTER.value
        text = str(value.value if isinstance(value, Enum) else value).strip()
        return _CATEGORY_SPELLINGS.get(_spelling_key(text), text)

    @field_validator("engine_type", mode="before")
    @classmethod
    def _normalize_engine(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            return EngineType.SINGLE_ENGINE.value
        text = str(value.value if isinstance(value, Enum) else value).strip()
        return _ENGINE_SPELLINGS.get(_spelling_key(text), text)

    @field_validator(*HOUR_FIELDS, mode="before")
    @classmethod
    def _lenient_hours(cls, value: Any) -> Optional[float]:
        return parse_hours(value)

    @field_validator("custom_field_values", mode="before")
    @classmethod
    def _normalize_custom_values(cls, value: Any) -> Dict[str, float]:
        if not isinstance(value, dict):
            return {}
        out: Dict[str, float] = {}
        for key, raw in value.items():
            if key is None:
                continue
            hours = parse_hours(raw)
            if hours is not None:
                out[str(key).strip()] = hours
        return out

    @property
    def is_single_engine(self) -> bool:
        return self.engine_type == EngineType.SINGLE_ENGINE.value

    @property
    def is_multi_engine(self) -> bool:
        return self.engine_type == EngineType.MULTI_ENGINE.value

    def hours(self, name: str) -> float:
        """Hours for one of HOUR_FIELDS, 0.0 when not recorded."""
        value = getattr(self, name)
        return value if value is not None else 0.0

    def custom_value(self, field_id: str) -> float:
        return self.custom_field_values.get(str(field_id), 0.0)


class LogbookExportRequest(BaseModel):
    """Body for the logbook export endpoints: flights already fetched by the caller."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    flights: List[FlightRecord] = Field(default_factory=list)
    custom_fields: List[CustomFieldDefinition] = Field(
        default_factory=list,
        validation_alias=AliasChoices("custom_fields", "customFields"),
    )
