"""
API tests for appointment CRUD, ordering, the upcoming/past overview and
per-user isolation.
"""
from datetime import datetime, timezone

URL = "/api/v1/appointments"


def create(client, headers, **fields):
    body = {"title": "Checkup", "appointment_date": "2025-03-10", "appointment_time": "09:00"}
    body.update(fields)
    r = client.post(URL, json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def test_round_trip(client, auth_headers):
    created = create(client, auth_headers)
    assert created["id"]
    assert created["doctor_name"] is None

    rows = client.get(URL, headers=auth_headers).json()
    assert [(a["title"], a["appointment_date"], a["appointment_time"]) for a in rows] == [
        ("Checkup", "2025-03-10", "09:00"),
    ]

    r = client.patch(f"{URL}/{created['id']}", json={"title": "Follow-up"}, headers=auth_headers)
    assert r.status_code == 200
    rows = client.get(URL, headers=auth_headers).json()
    assert rows[0]["title"] == "Follow-up"
    assert rows[0]["appointment_date"] == "2025-03-10"
    assert rows[0]["appointment_time"] == "09:00"

    r = client.delete(f"{URL}/{created['id']}", headers=auth_headers)
    assert r.status_code == 204
    assert client.get(URL, headers=auth_headers).json() == []


def test_list_is_ordered_by_date_then_time(client, auth_headers):
    create(client, auth_headers, title="c", appointment_date="2025-03-12", appointment_time="08:00")
    create(client, auth_headers, title="b", appointment_date="2025-03-11", appointment_time="15:30")
    create(client, auth_headers, title="a", appointment_date="2025-03-11", appointment_time="09:15")

    titles = [a["title"] for a in client.get(URL, headers=auth_headers).json()]
    assert titles == ["a", "b", "c"]


def test_get_single(client, auth_headers):
    created = create(client, auth_headers, doctor_name="Dr. Smith", location="Room 4", notes="Fasting")
    r = client.get(f"{URL}/{created['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["doctor_name"] == "Dr. Smith"
    assert r.json()["location"] == "Room 4"


def test_overview_splits_at_now(client, clock, auth_headers):
    # clock is 2025-03-10 12:00 UTC
    create(client, auth_headers, title="morning", appointment_time="09:00")
    create(client, auth_headers, title="noon", appointment_time="12:00")
    create(client, auth_headers, title="tomorrow", appointment_date="2025-03-11")

    body = client.get(f"{URL}/overview", headers=auth_headers).json()
    assert [a["title"] for a in body["upcoming"]] == ["noon", "tomorrow"]
    assert [a["title"] for a in body["past"]] == ["morning"]

    clock.now = datetime(2025, 3, 10, 12, 1, tzinfo=timezone.utc)
    body = client.get(f"{URL}/overview", headers=auth_headers).json()
    assert [a["title"] for a in body["past"]] == ["morning", "noon"]


def test_patch_leaves_unsent_fields_alone(client, auth_headers):
    created = create(client, auth_headers, notes="Bring referral")
    r = client.patch(f"{URL}/{created['id']}", json={"location": "Clinic B"}, headers=auth_headers)
    assert r.json()["notes"] == "Bring referral"
    assert r.json()["location"] == "Clinic B"


def test_patch_can_clear_optional_field(client, auth_headers):
    created = create(client, auth_headers, notes="x")
    r = client.patch(f"{URL}/{created['id']}", json={"notes": None}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["notes"] is None


def test_patch_rejects_unknown_and_null_required_keys(client, auth_headers):
    created = create(client, auth_headers)
    assert client.patch(f"{URL}/{created['id']}", json={"user_id": 99}, headers=auth_headers).status_code == 422
    assert client.patch(f"{URL}/{created['id']}", json={"title": None}, headers=auth_headers).status_code == 422
    assert client.patch(f"{URL}/{created['id']}", json={"appointment_time": "9am"}, headers=auth_headers).status_code == 422


def test_create_validation(client, auth_headers):
    bad = [
        {"appointment_date": "2025-03-10", "appointment_time": "09:00"},
        {"title": "", "appointment_date": "2025-03-10", "appointment_time": "09:00"},
        {"title": "x", "appointment_date": "not-a-date", "appointment_time": "09:00"},
        {"title": "x", "appointment_date": "2025-03-10"},
    ]
    for body in bad:
        assert client.post(URL, json=body, headers=auth_headers).status_code == 422


def test_owner_comes_from_session(client, auth_headers, other_headers):
    created = create(client, auth_headers, user_id=12345)
    me = client.get("/api/v1/auth/me", headers=auth_headers).json()
    assert created["user_id"] == me["id"]


def test_other_users_rows_are_invisible(client, auth_headers, other_headers):
    mine = create(client, auth_headers)

    assert client.get(URL, headers=other_headers).json() == []
    assert client.get(f"{URL}/{mine['id']}", headers=other_headers).status_code == 404
    assert client.patch(f"{URL}/{mine['id']}", json={"title": "hijacked"}, headers=other_headers).status_code == 404
    assert client.delete(f"{URL}/{mine['id']}", headers=other_headers).status_code == 404

    rows = client.get(URL, headers=auth_headers).json()
    assert rows[0]["title"] == "Checkup"


def test_missing_id_is_404(client, auth_headers):
    assert client.patch(f"{URL}/999", json={"title": "x"}, headers=auth_headers).status_code == 404
    assert client.delete(f"{URL}/999", headers=auth_headers).status_code == 404


def test_read_after_write_through_cache(client, auth_headers):
    assert client.get(URL, headers=auth_headers).json() == []  # primes the cache
    create(client, auth_headers)
    assert len(client.get(URL, headers=auth_headers).json()) == 1


def test_requires_authentication(client):
    assert client.get(URL).status_code == 401
    assert client.get(URL, headers={"Authorization": "Bearer nope"}).status_code == 401
