"""
Logbook hour totals.

Totals are a left fold over the flights in chronological order: each spread
starts from the previous spread's snapshot ("brought forward") and produces a
new snapshot. Snapshots are never mutated.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from models import AircraftCategory, CustomFieldDefinition, FlightRecord

# (totals attribute, flight attribute) for flights flown single-engine
SINGLE_ENGINE_BUCKETS = (
    ("se_day_dual", "day_dual"),
    ("se_day_pic", "day_pic"),
    ("se_night_dual", "night_dual"),
    ("se_night_pic", "night_pic"),
)

MULTI_ENGINE_BUCKETS = (
    ("me_day_dual", "day_dual"),
    ("me_day_pic", "day_pic"),
    ("me_day_copilot", "day_sic"),
    ("me_day_cmnd", "day_cmnd_practice"),
    ("me_night_dual", "night_dual"),
    ("me_night_pic", "night_pic"),
    ("me_night_copilot", "night_sic"),
    ("me_night_cmnd", "night_cmnd_practice"),
)

INSTRUMENT_BUCKETS = (
    ("instrument_actual", "instrument_hours"),
    ("instrument_simulated", "simulated_instrument_hours"),
    ("instrument_ground", "ground_instrument_hours"),
)

CATEGORY_BUCKETS = {
    AircraftCategory.HELICOPTER.value: "helicopter_total",
    AircraftCategory.AEROPLANE.value: "aeroplane_total",
    AircraftCategory.SIMULATOR.value: "simulator_total",
}

# Page B column order for the fixed hours columns.
HOURS_COLUMN_ORDER = tuple(
    name for name, _ in (*SINGLE_ENGINE_BUCKETS, *MULTI_ENGINE_BUCKETS, *INSTRUMENT_BUCKETS)
)


@dataclass(frozen=True)
class CategoryTotals:
    se_day_dual: float = 0.0
    se_day_pic: float = 0.0
    se_night_dual: float = 0.0
    se_night_pic: float = 0.0
    me_day_dual: float = 0.0
    me_day_pic: float = 0.0
    me_day_copilot: float = 0.0
    me_day_cmnd: float = 0.0
    me_night_dual: float = 0.0
    me_night_pic: float = 0.0
    me_night_copilot: float = 0.0
    me_night_cmnd: float = 0.0
    instrument_actual: float = 0.0
    instrument_simulated: float = 0.0
    instrument_ground: float = 0.0
    helicopter_total: float = 0.0
    aeroplane_total: float = 0.0
    simulator_total: float = 0.0
    # helicopter + aeroplane; simulator time never counts
    grand_total: float = 0.0
    custom: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # read-only view so a snapshot cannot change after it is taken
        object.__setattr__(self, "custom", MappingProxyType(dict(self.custom)))

    @classmethod
    def zero(cls, custom_fields: Iterable[CustomFieldDefinition] = ()) -> "CategoryTotals":
        return cls(custom={cf.id: 0.0 for cf in custom_fields})

    def custom_total(self, field_id: str) -> float:
        return self.custom.get(str(field_id), 0.0)

    def single_engine_total(self) -> float:
        return sum(getattr(self, name) for name, _ in SINGLE_ENGINE_BUCKETS)

    def multi_engine_total(self) -> float:
        return sum(getattr(self, name) for name, _ in MULTI_ENGINE_BUCKETS)

    def hours_columns(self, custom_fields: Sequence[CustomFieldDefinition] = ()) -> List[float]:
        """Values in Page B column order: 15 fixed columns then one per custom field."""
        values = [getattr(self, name) for name in HOURS_COLUMN_ORDER]
        values.extend(self.custom_total(cf.id) for cf in custom_fields)
        return values

    def as_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "custom"}
        out["custom"] = dict(self.custom)
        return out


def accumulate(
    flights: Iterable[FlightRecord],
    previous: CategoryTotals,
    custom_fields: Sequence[CustomFieldDefinition] = (),
) -> CategoryTotals:
    """
    Return previous + flights as a new snapshot.

    Engine-type hours go to exactly one of the single-engine or multi-engine
    buckets (neither for an unrecognised engine type). Instrument hours count
    for every flight. Flight time goes to the bucket for its category and, for
    anything other than a simulator, to the grand total. Only the selected
    custom fields are carried; with no selection the fields already in
    previous carry on.
    """
    sums: Dict[str, float] = {
        f.name: getattr(previous, f.name) for f in fields(previous) if f.name != "custom"
    }
    field_ids = [cf.id for cf in custom_fields] or list(previous.custom)
    custom: Dict[str, float] = {field_id: previous.custom_total(field_id) for field_id in field_ids}

    for flight in flights:
        if flight.is_single_engine:
            for bucket, source in SINGLE_ENGINE_BUCKETS:
                sums[bucket] += flight.hours(source)
        elif flight.is_multi_engine:
            for bucket, source in MULTI_ENGINE_BUCKETS:
                sums[bucket] += flight.hours(source)

        for bucket, source in INSTRUMENT_BUCKETS:
            sums[bucket] += flight.hours(source)

        flight_time = flight.hours("flight_time_hours")
        category_bucket = CATEGORY_BUCKETS.get(flight.aircraft_category)
        if category_bucket is not None:
            sums[category_bucket] += flight_time
        if flight.aircraft_category != AircraftCategory.SIMULATOR.value:
            sums["grand_total"] += flight_time

        for field_id in custom:
            custom[field_id] += flight.custom_value(field_id)

    return replace(previous, custom=custom, **sums)


def fold_spreads(
    chunks: Iterable[Sequence[FlightRecord]],
    custom_fields: Sequence[CustomFieldDefinition] = (),
    start: Optional[CategoryTotals] = None,
) -> List[Tuple[CategoryTotals, CategoryTotals]]:
    """(brought_forward, cumulative) for each chunk, in order."""
    brought_forward = start if start is not None else CategoryTotals.zero(custom_fields)
    out: List[Tuple[CategoryTotals, CategoryTotals]] = []
    for chunk in chunks:
        cumulative = accumulate(chunk, brought_forward, custom_fields)
        out.append((brought_forward, cumulative))
        brought_forward = cumulative
    return out
