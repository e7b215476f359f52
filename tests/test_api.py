from __future__ import annotations

import pytest

from school_attendance.container import build_container
from school_attendance.main import create_app
from school_attendance.settings import load_settings

TESTING = "school_attendance.settings.testing"


@pytest.fixture
def app(store):
    container = build_container(load_settings(TESTING), store=store)
    return create_app(TESTING, container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(client):
    with client.session_transaction() as sess:
        sess["user_id"] = 1
        sess["role"] = "admin"
    return client


def test_slots_for_a_monday_in_class_one(client):
    res = client.get("/api/catalog/slots?date=2026-10-05&kelas=1")

    assert res.status_code == 200
    body = res.get_json()
    assert body["day"] == "Senin"
    assert [s["label"] for s in body["slots"]] == [
        "07:30 - Matematika (Budi Santoso)",
        "08:40 - IPA (Siti Aminah)",
    ]


def test_catalog_reload_reports_counts(client):
    res = client.post("/api/catalog/reload")

    assert res.status_code == 200
    assert res.get_json()["persons"] == 6
    assert client.get("/api/catalog").get_json()["counts"]["slots"] == 3


def test_write_requires_admin_session(client, store):
    res = client.post(
        "/api/attendance/siswa/status",
        json={"jadwalId": "J1", "personId": "S1", "tanggal": "2026-10-05", "status": "Hadir"},
    )

    assert res.status_code == 403
    assert res.get_json()["result"] == "PERMISSION_DENIED"
    assert store.documents("absensiSiswa") == {}


def test_admin_write_is_visible_in_day_listing(admin, store):
    res = admin.post(
        "/api/attendance/siswa/status",
        json={"jadwalId": "J1", "personId": "S1", "tanggal": "2026-10-05", "status": "Sakit", "keterangan": "Flu"},
    )

    assert res.status_code == 200
    assert res.get_json()["record_id"] == "J1|S1|2026-10-05"
    assert store.get("absensiSiswa", "J1|S1|2026-10-05")["kelas"] == 1

    listing = admin.get("/api/attendance/siswa?date=2026-10-05&kelas=1&jadwal=J1").get_json()
    assert listing["records"] == [
        {
            "id": "J1|S1|2026-10-05",
            "jadwalId": "J1",
            "personId": "S1",
            "tanggal": "2026-10-05",
            "status": "Sakit",
            "keterangan": "Flu",
            "kelas": 1,
        }
    ]


def test_teacher_write_returns_flashed_confirmation(admin):
    res = admin.post(
        "/api/attendance/guru/status",
        json={"jadwalId": "J2", "personId": "G2", "tanggal": "2026-10-05", "status": "Izin"},
    )

    assert res.status_code == 200
    assert res.get_json()["messages"] == [
        ["success", "Absensi diperbarui. Status guru Siti Aminah diubah menjadi Izin."]
    ]


def test_invalid_write_is_rejected(admin):
    res = admin.post(
        "/api/attendance/siswa/status",
        json={"jadwalId": "J1", "personId": "S1", "tanggal": "2026-10-05", "status": "Telat"},
    )

    assert res.status_code == 400
    assert res.get_json()["result"] == "INVALID"


def test_malformed_date_is_a_bad_request(admin):
    res = admin.post(
        "/api/attendance/siswa/status",
        json={"jadwalId": "J1", "personId": "S1", "tanggal": "05/10/2026", "status": "Hadir"},
    )

    assert res.status_code == 400
    assert "YYYY-MM-DD" in res.get_json()["error"]


def test_unknown_kind_is_not_found(client):
    assert client.get("/api/attendance/kepala?date=2026-10-05").status_code == 404
    assert client.get("/api/recap/kepala?month=2026-10").status_code == 404


def test_student_recap_for_one_class(admin, store):
    store.put("absensiSiswa", "J1|S1|2026-10-05", {"jadwalId": "J1", "siswaId": "S1", "tanggal": "2026-10-05", "status": "Hadir", "kelas": 1})
    store.put("absensiSiswa", "J1|S2|2026-10-05", {"jadwalId": "J1", "siswaId": "S2", "tanggal": "2026-10-05", "status": "Alpha", "kelas": 1})

    res = admin.get("/api/recap/siswa?month=2026-10&kelas=1&detail=1")

    assert res.status_code == 200
    recaps = res.get_json()["recaps"]
    assert [(r["name"], r["total"]) for r in recaps] == [("Andi Pratama", 1), ("Bunga Lestari", 1)]
    assert recaps[1]["counts"] == {"Hadir": 0, "Izin": 0, "Sakit": 0, "Alpha": 1}
    assert recaps[0]["details"][0]["subject"] == "Matematika"


def test_teacher_recap_by_class_is_rejected(client):
    res = client.get("/api/recap/guru?month=2026-10&kelas=1")

    assert res.status_code == 400


def test_invalid_month_is_rejected(client):
    res = client.get("/api/recap/siswa?month=2026-13")

    assert res.status_code == 400
    assert "Invalid month" in res.get_json()["error"]


def test_day_listing_by_class_includes_records_without_class(client, store):
    store.put("absensiSiswa", "AutoId1", {"jadwalId": "J2", "siswaId": "S2", "tanggal": "2026-10-05", "status": "Izin"})
    store.put("absensiSiswa", "AutoId2", {"jadwalId": "J3", "siswaId": "S3", "tanggal": "2026-10-05", "status": "Hadir"})

    res = client.get("/api/attendance/siswa?date=2026-10-05&kelas=1")

    assert res.status_code == 200
    assert [r["id"] for r in res.get_json()["records"]] == ["AutoId1"]
