from gowild_scanner.models import CookieRecord, FlightRecord, ScanResult, SessionCredential


def _flight(**overrides):
    data = dict(
        origin="DEN",
        destination="MCO",
        date="2025-12-15",
        depart_time="6:00 AM",
        arrive_time="9:35 AM",
        stops=0,
        is_go_wild=True,
        taxes_and_fees=14.99,
        raw_price="$14.99",
    )
    data.update(overrides)
    return FlightRecord(**data)


def test_flight_to_dict_uses_camel_case_and_omits_unset_optionals():
    data = _flight().to_dict()

    assert data["departTime"] == "6:00 AM"
    assert data["isGoWild"] is True
    assert data["taxesAndFees"] == 14.99
    assert data["rawPrice"] == "$14.99"
    assert "duration" not in data
    assert "flightNumbers" not in data


def test_flight_to_dict_keeps_null_fees():
    data = _flight(taxes_and_fees=None, raw_price=None).to_dict()
    assert data["taxesAndFees"] is None
    assert "rawPrice" not in data


def test_scan_result_with_cached_leaves_original_untouched():
    result = ScanResult("DEN", "MCO", "2025-12-15", flights=[_flight()], scanned_at=1)

    copy = result.with_cached(True)

    assert copy.cached is True
    assert result.cached is False
    assert copy.flights == result.flights


def test_scan_result_error_serialized_only_when_set():
    assert "error" not in ScanResult("DEN", "MCO", "2025-12-15").to_dict()
    assert ScanResult("DEN", "MCO", "2025-12-15", error="boom").to_dict()["error"] == "boom"


def test_scan_result_from_cached_dict():
    stored = ScanResult(
        "DEN",
        "MCO",
        "2025-12-15",
        flights=[_flight(), _flight(depart_time="1:00 PM", is_go_wild=False)],
        scanned_at=1_700_000_000_000,
    ).to_dict()

    restored = ScanResult.from_dict(stored)

    assert [f.depart_time for f in restored.flights] == ["6:00 AM", "1:00 PM"]
    assert len(restored.go_wild_flights) == 1
    assert restored.scanned_at == 1_700_000_000_000


def test_session_credential_defaults_for_sparse_cookie():
    credential = SessionCredential.from_dict(
        {"cookies": [{"name": "frontier_session", "value": "abc"}], "savedAt": 5}
    )

    assert credential.saved_at == 5
    assert credential.cookies == [
        CookieRecord(name="frontier_session", value="abc", domain="", path="/", expires=-1)
    ]
