from packages.address_pipeline.types import Coordinates


def _addresses(client, headers, territory_id: int) -> list:
    resp = client.get(f"/territories/{territory_id}", headers=headers)
    assert resp.status_code == 200
    return resp.json()["addresses"]


def test_import_scan_end_to_end(client, headers, territory, geocoder) -> None:
    payload = {
        "lines": "100 Oak Street\n100 Oak Street\nno visible text\n102B Oak Street",
        "default_city": "Springfield",
        "status": "contact",
    }
    resp = client.post(f"/territories/{territory['id']}/addresses/import-scan", json=payload, headers=headers)

    assert resp.status_code == 200
    assert resp.json() == {"created": 2}

    rows = _addresses(client, headers, territory["id"])
    assert [(r["civic_number"], r["street"], r["city"], r["status"]) for r in rows] == [
        ("100", "Oak Street", "Springfield", "contact"),
        ("102B", "Oak Street", "Springfield", "contact"),
    ]
    assert all(r["do_not_call"] is False for r in rows)
    assert len(geocoder.calls) == 2


def test_import_scan_stores_geocoded_coordinates(client, headers, territory, geocoder) -> None:
    geocoder.coordinates = Coordinates(lat=45.5017123, lng=-73.5672987)
    resp = client.post(
        f"/territories/{territory['id']}/addresses/import-scan",
        json={"lines": "12 Rue Peel", "default_city": "Montreal", "default_country": "CA"},
        headers=headers,
    )
    assert resp.json() == {"created": 1}

    row = _addresses(client, headers, territory["id"])[0]
    assert row["lat"] == 45.5017123
    assert row["lng"] == -73.5672987
    assert row["status"] == "not_visited"
    assert geocoder.calls[0].country == "CA"


def test_import_scan_do_not_call_status_sets_flag(client, headers, territory) -> None:
    client.post(
        f"/territories/{territory['id']}/addresses/import-scan",
        json={"lines": "5 Elm Street", "status": "do_not_call"},
        headers=headers,
    )
    row = _addresses(client, headers, territory["id"])[0]
    assert row["status"] == "do_not_call"
    assert row["do_not_call"] is True


def test_import_scan_without_address_lines_creates_nothing(client, headers, territory) -> None:
    resp = client.post(
        f"/territories/{territory['id']}/addresses/import-scan",
        json={"lines": "nothing here\n\nabc"},
        headers=headers,
    )
    assert resp.json() == {"created": 0}
    assert _addresses(client, headers, territory["id"]) == []


def test_import_scan_rejects_oversized_text(client, headers, territory) -> None:
    resp = client.post(
        f"/territories/{territory['id']}/addresses/import-scan",
        json={"lines": "1 Main St\n" * 6000},
        headers=headers,
    )
    assert resp.status_code == 422
    assert _addresses(client, headers, territory["id"]) == []


def test_bulk_store_rejects_more_than_500_addresses(client, headers, territory) -> None:
    addresses = [{"civic_number": str(i), "street": "Main St"} for i in range(501)]
    resp = client.post(
        f"/territories/{territory['id']}/addresses/bulk",
        json={"addresses": addresses},
        headers=headers,
    )
    assert resp.status_code == 422
    assert _addresses(client, headers, territory["id"]) == []


def test_bulk_store_dedups_within_batch(client, headers, territory, geocoder) -> None:
    addresses = [
        {"civic_number": "10", "street": "Elm St"},
        {"civic_number": "10", "street": " elm st "},
        {"civic_number": "10", "street": "Elm St", "unit": "2"},
        {"notes": "no street or label"},
    ]
    resp = client.post(
        f"/territories/{territory['id']}/addresses/bulk",
        json={"addresses": addresses, "do_not_call": True},
        headers=headers,
    )
    assert resp.json() == {"created": 2}

    rows = _addresses(client, headers, territory["id"])
    assert sorted((r["unit"] or "") for r in rows) == ["", "2"]
    assert all(r["status"] == "do_not_call" and r["do_not_call"] is True for r in rows)
    assert geocoder.calls == []


def test_store_address_geocodes_only_without_coordinates(client, headers, territory, geocoder) -> None:
    geocoder.coordinates = Coordinates(lat=40.0, lng=-75.0)
    url = f"/territories/{territory['id']}/addresses"

    first = client.post(url, json={"civic_number": "1", "street": "Pine St", "city": "Springfield"}, headers=headers)
    assert first.status_code == 201
    assert (first.json()["lat"], first.json()["lng"]) == (40.0, -75.0)

    second = client.post(url, json={"label": "Blue house", "lat": 41.0, "lng": -74.0}, headers=headers)
    assert second.status_code == 201
    assert (second.json()["lat"], second.json()["lng"]) == (41.0, -74.0)
    assert len(geocoder.calls) == 1


def test_store_address_requires_street_or_label(client, headers, territory) -> None:
    resp = client.post(f"/territories/{territory['id']}/addresses", json={"civic_number": "3"}, headers=headers)
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "STREET_OR_LABEL_REQUIRED"
    assert _addresses(client, headers, territory["id"]) == []


def test_store_address_flag_forces_status(client, headers, territory) -> None:
    resp = client.post(
        f"/territories/{territory['id']}/addresses",
        json={"street": "Pine St", "status": "contact", "do_not_call": True},
        headers=headers,
    )
    assert resp.json()["status"] == "do_not_call"
    assert resp.json()["do_not_call"] is True


def test_update_address_keeps_do_not_call_coherent(client, headers, territory) -> None:
    created = client.post(
        f"/territories/{territory['id']}/addresses",
        json={"street": "Pine St", "lat": 41.0, "lng": -74.0},
        headers=headers,
    ).json()
    url = f"/addresses/{created['id']}"

    flagged = client.patch(url, json={"do_not_call": True}, headers=headers).json()
    assert (flagged["status"], flagged["do_not_call"]) == ("do_not_call", True)

    # Stored flag still applies when only the status is edited.
    still_flagged = client.patch(url, json={"status": "contact"}, headers=headers).json()
    assert (still_flagged["status"], still_flagged["do_not_call"]) == ("do_not_call", True)

    cleared = client.patch(url, json={"status": "contact", "do_not_call": False}, headers=headers).json()
    assert (cleared["status"], cleared["do_not_call"]) == ("contact", False)

    by_status = client.patch(url, json={"status": "do_not_call"}, headers=headers).json()
    assert (by_status["status"], by_status["do_not_call"]) == ("do_not_call", True)
    assert by_status["street"] == "Pine St"


def test_update_address_geocodes_when_coordinates_cleared(client, headers, territory, geocoder) -> None:
    created = client.post(
        f"/territories/{territory['id']}/addresses",
        json={"civic_number": "9", "street": "Pine St", "lat": 41.0, "lng": -74.0},
        headers=headers,
    ).json()
    geocoder.coordinates = Coordinates(lat=42.0, lng=-73.0)

    updated = client.patch(f"/addresses/{created['id']}", json={"lat": None, "lng": None}, headers=headers).json()
    assert (updated["lat"], updated["lng"]) == (42.0, -73.0)
    assert geocoder.calls[-1].street == "Pine St"


def test_delete_address(client, headers, territory) -> None:
    created = client.post(
        f"/territories/{territory['id']}/addresses", json={"label": "Corner shop"}, headers=headers
    ).json()

    assert client.delete(f"/addresses/{created['id']}", headers=headers).status_code == 204
    assert client.get(f"/addresses/{created['id']}", headers=headers).status_code == 404


def test_foreign_organization_sees_not_found(client, headers, other_headers, territory) -> None:
    created = client.post(
        f"/territories/{territory['id']}/addresses", json={"street": "Pine St"}, headers=headers
    ).json()

    assert client.get(f"/addresses/{created['id']}", headers=other_headers).status_code == 404
    assert client.patch(f"/addresses/{created['id']}", json={}, headers=other_headers).status_code == 404
    resp = client.post(
        f"/territories/{territory['id']}/addresses/import-scan",
        json={"lines": "1 Main St"},
        headers=other_headers,
    )
    assert resp.status_code == 404
    assert len(_addresses(client, headers, territory["id"])) == 1


def test_missing_organization_context_is_rejected(client, territory) -> None:
    resp = client.get(f"/territories/{territory['id']}")
    assert resp.status_code == 401
