from uuid import UUID

import pytest

from medlink.modules.doctors import repository as doctors_repo


async def test_admin_creates_hospital(api, admin):
    resp = await api.post(
        "/hospitals",
        json={"name": "  St. Mary  ", "city": "Boston", "address": "5 Elm St"},
        headers=admin.headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "St. Mary"
    assert body["rating"] == 0

    listing = (await api.get("/hospitals")).json()["data"]
    assert [h["id"] for h in listing] == [body["id"]]

    resp = await api.get(f"/hospitals/{body['id']}")
    assert resp.status_code == 200


async def test_non_admin_cannot_create_hospital(api, doctor):
    resp = await api.post(
        "/hospitals",
        json={"name": "Nope", "city": "Nowhere", "address": "-"},
        headers=doctor.headers,
    )
    assert resp.status_code == 403


async def test_unknown_hospital_is_404(api, admin):
    resp = await api.get(f"/hospitals/{admin.id}")
    assert resp.status_code == 404


async def test_link_doctor_to_hospital(api, admin, doctor, create_hospital):
    hospital = await create_hospital()
    assert (await api.get(f"/doctors/{doctor.id}")).json()["hospitals"] == []

    url = f"/doctors/{doctor.id}/hospitals/{hospital['id']}"
    resp = await api.post(url, headers=admin.headers)
    assert resp.status_code == 200
    assert [h["id"] for h in resp.json()["hospitals"]] == [hospital["id"]]

    # linking twice is harmless
    resp = await api.post(url, headers=admin.headers)
    assert len(resp.json()["hospitals"]) == 1


async def test_doctor_profile_is_public(api, doctor):
    resp = await api.get(f"/doctors/{doctor.id}")
    assert resp.status_code == 200
    assert resp.json()["email"] == "doctor@example.com"


async def test_patient_is_not_a_doctor(api, patient):
    resp = await api.get(f"/doctors/{patient.id}")
    assert resp.status_code == 404


async def test_change_request_approval_updates_profile(api, admin, doctor):
    resp = await api.post(
        "/doctors/requests",
        json={"changes": {"city": "Princeton", "yearsOfExperience": 12, "firstName": "Gregory"}},
        headers=doctor.headers,
    )
    assert resp.status_code == 201, resp.text
    req = resp.json()["data"]
    assert req["status"] == "PENDING"
    assert req["changes"] == {"city": "Princeton", "years_of_experience": 12, "first_name": "Gregory"}

    pending = (await api.get("/doctors/requests", headers=admin.headers)).json()["data"]
    assert [r["id"] for r in pending] == [req["id"]]

    resp = await api.post(
        f"/doctors/requests/{req['id']}/process", json={"status": "APPROVED"}, headers=admin.headers
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "APPROVED"

    profile = (await api.get(f"/doctors/{doctor.id}")).json()
    assert profile["city"] == "Princeton"
    assert profile["yearsOfExperience"] == 12
    assert profile["name"] == "Gregory House"

    # processed requests drop off the queue and cannot be processed twice
    assert (await api.get("/doctors/requests", headers=admin.headers)).json()["data"] == []
    resp = await api.post(
        f"/doctors/requests/{req['id']}/process", json={"status": "REJECTED"}, headers=admin.headers
    )
    assert resp.status_code == 409


async def test_rejected_change_request_leaves_profile(api, admin, doctor):
    req = (
        await api.post("/doctors/requests", json={"changes": {"city": "Gotham"}}, headers=doctor.headers)
    ).json()["data"]
    await api.post(f"/doctors/requests/{req['id']}/process", json={"status": "REJECTED"}, headers=admin.headers)

    profile = (await api.get(f"/doctors/{doctor.id}")).json()
    assert profile["city"] is None


async def test_change_requests_queue_is_admin_only(api, doctor):
    resp = await api.get("/doctors/requests", headers=doctor.headers)
    assert resp.status_code == 403


# --- Specializations ---

async def create_specialization(api, admin, name):
    resp = await api.post("/specializations", json={"name": name}, headers=admin.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_specializations_are_admin_managed(api, admin, doctor):
    cardio = await create_specialization(api, admin, "Cardiology")
    await create_specialization(api, admin, " Allergy ")

    listing = (await api.get("/specializations")).json()["data"]
    assert [s["name"] for s in listing] == ["Allergy", "Cardiology"]

    resp = await api.post("/specializations", json={"name": "cardiology"}, headers=admin.headers)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "specialization_exists"

    resp = await api.post("/specializations", json={"name": "Surgery"}, headers=doctor.headers)
    assert resp.status_code == 403

    resp = await api.delete(f"/specializations/{cardio['id']}", headers=admin.headers)
    assert resp.status_code == 204
    assert [s["name"] for s in (await api.get("/specializations")).json()["data"]] == ["Allergy"]

    resp = await api.delete(f"/specializations/{cardio['id']}", headers=admin.headers)
    assert resp.status_code == 404


async def test_assigning_specialization_to_doctor(api, admin, doctor, patient):
    spec = await create_specialization(api, admin, "Diagnostics")
    url = f"/doctors/{doctor.id}/specialization"

    resp = await api.put(url, json={"specializationId": spec["id"]}, headers=admin.headers)
    assert resp.status_code == 200
    assert resp.json()["specialization"] == {"id": spec["id"], "name": "Diagnostics"}

    resp = await api.put(url, json={"specializationId": patient.id}, headers=admin.headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "specialization_not_found"

    # deleting the specialization detaches it from the doctor
    await api.delete(f"/specializations/{spec['id']}", headers=admin.headers)
    assert (await api.get(f"/doctors/{doctor.id}")).json()["specialization"] is None


# --- Directory ---

async def approve_changes(api, admin, doctor, changes):
    req = (await api.post("/doctors/requests", json={"changes": changes}, headers=doctor.headers)).json()["data"]
    resp = await api.post(
        f"/doctors/requests/{req['id']}/process", json={"status": "APPROVED"}, headers=admin.headers
    )
    assert resp.status_code == 200, resp.text


@pytest.fixture
async def directory(api, admin, register, doctor, patient):
    wilson = await register("wilson@example.com", role="doctor", first_name="James", last_name="Wilson")
    cuddy = await register("cuddy@example.com", role="doctor", first_name="Lisa", last_name="Cuddy")
    await approve_changes(api, admin, doctor, {"city": "Princeton", "yearsOfExperience": 20})
    await approve_changes(api, admin, wilson, {"city": "princeton", "yearsOfExperience": 15})
    await approve_changes(api, admin, cuddy, {"city": "Boston", "yearsOfExperience": 25})

    oncology = await create_specialization(api, admin, "Oncology")
    await api.put(f"/doctors/{wilson.id}/specialization", json={"specializationId": oncology["id"]}, headers=admin.headers)
    return {"house": doctor, "wilson": wilson, "cuddy": cuddy, "oncology": oncology}


async def test_doctor_list_filters(api, directory):
    resp = await api.get("/doctors", params={"city": "PRINCETON", "sortBy": "experience", "order": "asc"})
    assert resp.status_code == 200
    body = resp.json()
    assert [d["name"] for d in body["data"]] == ["James Wilson", "Greg House"]
    assert body["meta"] == {"page": 1, "limit": 20, "total": 2, "totalPages": 1}

    by_name = (await api.get("/doctors", params={"specialization": "oncology"})).json()["data"]
    by_id = (await api.get("/doctors", params={"specialization": directory["oncology"]["id"]})).json()["data"]
    assert [d["id"] for d in by_name] == [d["id"] for d in by_id] == [directory["wilson"].id]
    assert by_name[0]["specialization"]["name"] == "Oncology"

    assert (await api.get("/doctors", params={"city": "Gotham"})).json()["data"] == []


async def test_doctor_list_sorting_and_pages(api, directory):
    first = (await api.get("/doctors", params={"sortBy": "name", "order": "asc", "limit": 2})).json()
    assert [d["name"] for d in first["data"]] == ["Lisa Cuddy", "Greg House"]
    assert first["meta"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}

    second = (await api.get("/doctors", params={"sortBy": "name", "order": "asc", "limit": 2, "page": 2})).json()
    assert [d["name"] for d in second["data"]] == ["James Wilson"]

    resp = await api.get("/doctors", params={"sortBy": "salary"})
    assert resp.status_code == 422


async def test_doctor_stats(api, session_factory, directory):
    resp = await api.get("/doctors/stats")
    assert resp.status_code == 200
    assert resp.json() == {"data": {"totalDoctors": 3, "totalCities": 2, "averageRating": 0}}

    async with session_factory() as session:
        await doctors_repo.set_rating(session, doctor_id=UUID(directory["house"].id), rating=4.0, review_count=2)
        await doctors_repo.set_rating(session, doctor_id=UUID(directory["cuddy"].id), rating=4.5, review_count=1)
        await session.commit()

    stats = (await api.get("/doctors/stats")).json()["data"]
    assert stats["averageRating"] == 4.25
