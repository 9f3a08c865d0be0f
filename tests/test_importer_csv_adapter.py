import io

import pytest

from estate_app.importer.adapters.csv_landlords import (
    CSVAdapterError,
    CSVDecodeError,
    CSVHeaderError,
    CSVMalformedError,
    LandlordCSVAdapter,
)


def _make_csv(contents: str) -> io.StringIO:
    stream = io.StringIO(contents)
    stream.seek(0)
    return stream


def test_adapter_accepts_alias_headers_and_keeps_raw_values():
    csv_stream = _make_csv("Name,Phone Number,Occupancy,Street,Email\n" "  Ada Obi ,0801 234 5678,Owner,Road 1,\n")

    adapter = LandlordCSVAdapter(csv_stream)
    rows = list(adapter.iter_rows())

    assert adapter.header is not None
    assert adapter.header.canonical_headers == ("full_name", "phone", "occupancy_type", "road", "email")
    assert len(rows) == 1
    row = rows[0]
    assert row.row_number == 1
    assert row.data["full_name"] == "  Ada Obi "
    assert row.data["phone"] == "0801 234 5678"
    assert row.data["email"] == ""
    assert adapter.statistics.rows_processed == 1


def test_adapter_rejects_missing_required_headers():
    csv_stream = _make_csv("full_name,phone\n" "Ada,08012345678\n")
    adapter = LandlordCSVAdapter(csv_stream)

    with pytest.raises(CSVHeaderError) as excinfo:
        list(adapter.iter_rows())

    error = excinfo.value
    assert "Missing required columns" in str(error)
    assert error.missing == ("occupancy_type", "road")


def test_adapter_rejects_duplicate_canonical_headers():
    csv_stream = _make_csv("full_name,name,phone,occupancy_type,road\n")

    with pytest.raises(CSVHeaderError) as excinfo:
        list(LandlordCSVAdapter(csv_stream).iter_rows())

    assert excinfo.value.duplicates == ("full_name",)


def test_adapter_rejects_empty_file():
    with pytest.raises(CSVHeaderError):
        list(LandlordCSVAdapter(_make_csv("")).iter_rows())


def test_adapter_skips_blank_rows_and_numbers_remaining_rows():
    csv_stream = _make_csv(
        "full_name,phone,occupancy_type,road\n"
        "Ada,08012345678,owner,Road 1\n"
        ",,,\n"
        "\n"
        "Bola,08087654321,tenant,Road 2\n"
    )

    adapter = LandlordCSVAdapter(csv_stream)
    rows = list(adapter.iter_rows())

    assert [row.row_number for row in rows] == [1, 2]
    assert rows[1].data["full_name"] == "Bola"
    assert adapter.statistics.rows_processed == 2
    assert adapter.statistics.rows_skipped_blank == 1


def test_adapter_carries_unknown_columns_and_pads_short_rows():
    csv_stream = _make_csv("full_name,phone,occupancy_type,road,notes\n" "Ada,08012345678,owner\n")

    adapter = LandlordCSVAdapter(csv_stream)
    rows = adapter.read_rows()

    assert adapter.header.ignored_headers == ("notes",)
    assert rows == [
        {"full_name": "Ada", "phone": "08012345678", "occupancy_type": "owner", "road": "", "notes": ""}
    ]


def test_from_bytes_strips_byte_order_mark():
    payload = "\ufefffull_name,phone,occupancy_type,road\nAda,08012345678,owner,Road 1\n".encode("utf-8")

    rows = LandlordCSVAdapter.from_bytes(payload).read_rows()

    assert rows[0]["full_name"] == "Ada"


def test_from_bytes_rejects_non_utf8_payloads():
    with pytest.raises(CSVDecodeError):
        LandlordCSVAdapter.from_bytes(b"full_name,phone\n\xff\xfe\xfa,1\n")


def test_adapter_reports_oversized_fields_as_adapter_errors():
    csv_stream = _make_csv("full_name,phone,occupancy_type,road\n" + "A" * 200_000 + ",08012345678,owner,Road 1\n")

    with pytest.raises(CSVMalformedError, match="Malformed CSV") as excinfo:
        list(LandlordCSVAdapter(csv_stream).iter_rows())

    assert isinstance(excinfo.value, CSVAdapterError)
