from __future__ import annotations

from datetime import UTC, datetime

from pyvin.models.record import CANONICAL_FIELDS
from pyvin.normalize import normalize_record, safe_str

_DECODED_AT = datetime(2026, 1, 1, tzinfo=UTC)


def test_vpic_keys_map_to_canonical_fields() -> None:
    raw = {
        "Make": "HONDA",
        "Model": "Accord",
        "ModelYear": "2003",
        "Manufacturer": "AMERICAN HONDA MOTOR CO., INC.",
        "PlantCountry": "UNITED STATES (USA)",
        "PlantState": "OHIO",
        "BodyClass": "Coupe",
        "EngineCylinders": "6",
        "FuelTypePrimary": "Gasoline",
        "ErrorCode": "0",
        "VIN": "1HGCM82633A004352",
    }

    record = normalize_record("1HGCM82633A004352", raw, decoded_at=_DECODED_AT)

    assert record.canonical() == {
        "make": "HONDA",
        "model": "Accord",
        "model_year": "2003",
        "manufacturer": "AMERICAN HONDA MOTOR CO., INC.",
        "plant_country": "UNITED STATES (USA)",
        "plant_state": "OHIO",
        "body_class": "Coupe",
        "engine_cylinders": "6",
        "fuel_type": "Gasoline",
    }
    assert record.raw == raw
    assert record.updated_at == _DECODED_AT


def test_jdpower_keys_and_numbers_are_coerced_to_text() -> None:
    raw = {"Make": "HARLEY-DAVIDSON", "Model": "Street Glide", "Year": 2019, "Cylinders": 2, "ModelType": "Touring"}

    record = normalize_record("1HD1KRC10KB000001", raw, decoded_at=_DECODED_AT)

    assert record.model_year == "2019"
    assert record.engine_cylinders == "2"
    assert record.body_class == "Touring"
    assert record.manufacturer is None


def test_missing_null_and_blank_values_are_absent() -> None:
    raw = {"Make": None, "Model": "", "ModelYear": "   ", "BodyClass": {"nested": True}, "Extra": [1, 2]}

    record = normalize_record("VIN123", raw, decoded_at=_DECODED_AT)

    assert record.is_empty
    assert record.raw == raw


def test_record_is_keyed_by_requested_vin_not_payload_vin() -> None:
    record = normalize_record("REQUESTED", {"VIN": "SOMETHING-ELSE", "Make": "Ford"}, decoded_at=_DECODED_AT)

    assert record.vin == "REQUESTED"
    assert record.raw["VIN"] == "SOMETHING-ELSE"


def test_empty_or_non_mapping_payload_gives_empty_record() -> None:
    empty = normalize_record("VIN123", {}, decoded_at=_DECODED_AT)
    garbage = normalize_record("VIN123", ["not", "a", "mapping"], decoded_at=_DECODED_AT)

    for record in (empty, garbage):
        assert record.raw == {}
        assert all(getattr(record, name) is None for name in CANONICAL_FIELDS)


def test_payload_is_copied_not_shared() -> None:
    raw = {"Make": "Honda"}
    record = normalize_record("VIN123", raw, decoded_at=_DECODED_AT)

    raw["Make"] = "Changed"

    assert record.raw == {"Make": "Honda"}


def test_clock_stamps_updated_at_when_not_given() -> None:
    record = normalize_record("VIN123", {}, clock=lambda: _DECODED_AT)

    assert record.updated_at == _DECODED_AT


def test_safe_str() -> None:
    assert safe_str(2020) == "2020"
    assert safe_str(4.0) == "4"
    assert safe_str(1.6) == "1.6"
    assert safe_str(float("nan")) is None
    assert safe_str(" V6 ") == "V6"
    assert safe_str(True) == "true"
    assert safe_str([]) is None


def test_entry_supplies_fields_while_raw_keeps_the_whole_body() -> None:
    body = {"Count": 2, "Message": "ok", "Results": [{"Make": "HONDA", "ModelYear": "2003"}, {"Make": "ACURA"}]}

    record = normalize_record("VIN123", body, entry=body["Results"][0], decoded_at=_DECODED_AT)

    assert record.make == "HONDA"
    assert record.model_year == "2003"
    assert record.raw == body


def test_empty_entry_gives_empty_record_with_body_kept() -> None:
    body = {"Count": 0, "Results": []}

    record = normalize_record("VIN123", body, entry={}, decoded_at=_DECODED_AT)

    assert record.is_empty
    assert record.raw == body
