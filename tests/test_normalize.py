"""Tests for record normalization."""

import logging

import pytest

from directory_aggregator.parsers import NormalizedRecord, Source, join_parts, normalize

EXPECTED_LABELS = [
    "Phone Number",
    "Company Name",
    "Full Name",
    "Areas Covered In The UK",
    "Address",
    "Email Address",
    "Attachments",
    "Working Days",
    "Working Times",
    "Bank Registration...",
    "Betters/File Num...",
    "Services Offered",
    "S.K.L.S. (2025) date",
    "S.K.I.L.L.S (2024)",
    "Signature",
    "Insurances & Licences",
    "Jobs Assigned",
    "Last Modified",
    "Broadcast Messages",
    "Jobs",
    "Jobs 2",
    "Jobs 3",
    "Jobs 4",
    "SMS Responses",
]

MAPPED_LABELS = {
    "Phone Number",
    "Company Name",
    "Areas Covered In The UK",
    "Address",
    "Email Address",
    "Betters/File Num...",
    "Services Offered",
    "Last Modified",
}


@pytest.mark.parametrize("source", ["google", "refcom", "fgas", "bogus"])
def test_every_source_yields_fixed_field_set(source):
    data = normalize({}, source).to_dict()

    assert list(data.keys()) == EXPECTED_LABELS
    assert data["Attachments"] == []
    for label in set(EXPECTED_LABELS) - MAPPED_LABELS - {"Attachments"}:
        assert data[label] == ""
    assert data["Last Modified"].endswith("Z")


def test_labels_list_output_columns_in_order():
    assert NormalizedRecord.labels() == EXPECTED_LABELS


def test_unknown_source_returns_all_defaults_and_warns(caplog):
    raw = {"name": "Acme", "Company": "Acme", "companyName": "Acme"}

    with caplog.at_level(logging.WARNING):
        record = normalize(raw, "bogus")

    data = record.to_dict()
    assert data["Company Name"] == ""
    assert data["Services Offered"] == ""
    assert "Unknown source: bogus" in caplog.text


def test_records_do_not_share_mutable_defaults():
    first = NormalizedRecord()
    second = NormalizedRecord()
    first.attachments.append("cert.pdf")

    assert second.attachments == []
    assert second.to_dict()["Attachments"] == []


def test_join_parts_skips_empty_components_in_order():
    assert join_parts(["1 High St", "", None, "Leeds", 0, "LS1 4DY"]) == "1 High St, Leeds, LS1 4DY"
    assert join_parts([None, ""]) == ""


def test_google_mapping():
    raw = {
        "name": "Cool Air Ltd",
        "formatted_phone_number": "0113 496 0000",
        "formatted_address": "1 High St, Leeds LS1 4DY, UK",
        "types": ["hvac_contractor", "point_of_interest"],
        "plus_code": {"compound_code": "GV8F+2X Leeds, UK"},
        "website": "https://coolair.example",
    }

    data = normalize(raw, Source.GOOGLE).to_dict()

    assert data["Company Name"] == "Cool Air Ltd"
    assert data["Phone Number"] == "0113 496 0000"
    assert data["Address"] == "1 High St, Leeds LS1 4DY, UK"
    assert data["Services Offered"] == "hvac_contractor, point_of_interest"
    assert data["Areas Covered In The UK"] == "GV8F+2X"
    assert data["Email Address"] == ""


def test_google_mapping_without_plus_code_or_types():
    data = normalize({"name": "Cool Air Ltd"}, "GOOGLE").to_dict()

    assert data["Company Name"] == "Cool Air Ltd"
    assert data["Areas Covered In The UK"] == ""
    assert data["Services Offered"] == ""


def test_refcom_mapping():
    raw = {
        "companyId": 42,
        "companyName": "Chill Services",
        "telephoneNo": "0161 496 0000",
        "email": "info@chill.example",
        "addressLine1": "Unit 4",
        "addressLine2": "",
        "addressLine3": None,
        "town": "Manchester",
        "county": "Greater Manchester",
        "postcode": "M1 1AE",
        "fGas": True,
        "fGasCode": "REF1234",
    }

    data = normalize(raw, Source.REFCOM).to_dict()

    assert data["Company Name"] == "Chill Services"
    assert data["Phone Number"] == "0161 496 0000"
    assert data["Email Address"] == "info@chill.example"
    assert data["Address"] == "Unit 4, Manchester, Greater Manchester, M1 1AE"
    assert data["Areas Covered In The UK"] == "Greater Manchester"
    assert data["Services Offered"] == "FGAS Registered"
    assert data["Betters/File Num..."] == "REF1234"


def test_refcom_area_falls_back_to_town_and_fgas_flag_off():
    data = normalize({"town": "Bolton", "fGas": False}, "refcom").to_dict()

    assert data["Areas Covered In The UK"] == "Bolton"
    assert data["Services Offered"] == ""


def test_fgas_mapping():
    raw = {
        "Company": "Arctic Engineering",
        "Telephone": 1214960000,
        "Address_1": "5 Canal Rd",
        "Address_2": "",
        "Address_3": None,
        "Address_4": "Digbeth",
        "City": "Birmingham",
        "Zip_Code": "B5 5AA",
    }

    data = normalize(raw, Source.FGAS).to_dict()

    assert data["Company Name"] == "Arctic Engineering"
    assert data["Phone Number"] == "1214960000"
    assert data["Address"] == "5 Canal Rd, Digbeth, Birmingham, B5 5AA"
    assert data["Areas Covered In The UK"] == "Birmingham"
    assert data["Services Offered"] == "FGAS Registered"
    assert data["Betters/File Num..."] == ""


def test_malformed_input_never_raises():
    data = normalize(None, "fgas").to_dict()

    assert data["Company Name"] == ""
    assert data["Address"] == ""
    assert data["Services Offered"] == "FGAS Registered"

    data = normalize({"plus_code": "not-a-mapping", "types": "plumber"}, "google").to_dict()
    assert data["Areas Covered In The UK"] == ""
    assert data["Services Offered"] == "plumber"
