from datetime import date

from models import (
    AircraftCategory,
    CustomFieldDefinition,
    EngineType,
    FlightRecord,
    LogbookExportRequest,
)


def test_flight_record_accepts_camel_case_row_keys():
    flight = FlightRecord.model_validate(
        {
            "date": "2024-02-14",
            "aircraft_type": "R22",
            "registration": "G-ABCD",
            "pilot_in_command": "SELF",
            "flight_time_hours": "1.4",
            "day_pic": 1.4,
            "customFieldValues": {1: 0.5, "2": "0.3"},
        }
    )
    assert flight.flight_date == date(2024, 2, 14)
    assert flight.flight_time_hours == 1.4
    assert flight.custom_value("1") == 0.5
    assert flight.custom_value(2) == 0.3


def test_flight_record_defaults_match_storage_defaults():
    flight = FlightRecord()
    assert flight.aircraft_category == AircraftCategory.HELICOPTER.value
    assert flight.engine_type == EngineType.SINGLE_ENGINE.value
    assert flight.is_single_engine
    assert flight.hours("day_dual") == 0.0


def test_flight_record_lenient_numbers_and_text():
    flight = FlightRecord(day_pic="n/a", night_pic=None, registration=None, flight_details=42)
    assert flight.day_pic is None
    assert flight.hours("day_pic") == 0.0
    assert flight.registration == ""
    assert flight.flight_details == "42"


def test_engine_and_category_spellings_normalized():
    assert FlightRecord(engine_type="MultiEngine").is_multi_engine
    assert FlightRecord(engine_type="multi_engine").is_multi_engine
    assert FlightRecord(engine_type=EngineType.MULTI_ENGINE).is_multi_engine
    assert FlightRecord(aircraft_category="airplane").aircraft_category == "Aeroplane"
    assert FlightRecord(aircraft_category="SIMULATOR").aircraft_category == "Simulator"


def test_unrecognised_engine_type_kept_verbatim():
    flight = FlightRecord(engine_type="Turbojet")
    assert flight.engine_type == "Turbojet"
    assert not flight.is_single_engine
    assert not flight.is_multi_engine


def test_unparseable_date_is_none():
    assert FlightRecord(date="sometime").flight_date is None


def test_custom_field_definition_normalizes_id_and_label_alias():
    cf = CustomFieldDefinition.model_validate({"id": 7, "field_label": " NVG "})
    assert cf.id == "7"
    assert cf.label == "NVG"


def test_export_request_camel_case_custom_fields():
    req = LogbookExportRequest.model_validate(
        {"flights": [{"date": "2024-01-01"}], "customFields": [{"id": 1, "label": "Hoist"}]}
    )
    assert len(req.flights) == 1
    assert req.custom_fields[0].id == "1"
