import pytest

from tests.conftest import MONDAY


@pytest.fixture
def completed(api, book, doctor, hospital, set_availability):
    """Book a Monday slot for `patient` and walk it to COMPLETED."""

    async def _completed(patient, at="09:30"):
        await set_availability(doctor, [(1, "09:00", "12:00")])
        resp = await book(patient, doctor, hospital, f"{MONDAY.isoformat()}T{at}:00")
        assert resp.status_code == 201, resp.text
        appt_id = resp.json()["data"]["id"]
        for status in ("CONFIRMED", "COMPLETED"):
            resp = await api.patch(
                f"/appointments/{appt_id}/status", json={"status": status}, headers=doctor.headers
            )
            assert resp.status_code == 200, resp.text
        return appt_id

    return _completed


async def review(api, account, appointment_id, rating=5, comment=None):
    payload = {"appointmentId": appointment_id, "rating": rating}
    if comment:
        payload["comment"] = comment
    return await api.post("/reviews", json=payload, headers=account.headers)


async def test_review_updates_doctor_rating(api, patient, doctor, completed):
    appt_id = await completed(patient)

    resp = await review(api, patient, appt_id, rating=4, comment="Thorough")
    assert resp.status_code == 201, resp.text
    body = resp.json()["data"]
    assert body["rating"] == 4
    assert body["doctorId"] == doctor.id

    profile = (await api.get(f"/doctors/{doctor.id}")).json()
    assert profile["rating"] == 4.0
    assert profile["reviewCount"] == 1


async def test_rating_is_average_over_patients(api, register, patient, doctor, completed):
    other = await register("other@example.com")
    first = await completed(patient, at="09:00")
    second = await completed(other, at="10:00")

    assert (await review(api, patient, first, rating=5)).status_code == 201
    assert (await review(api, other, second, rating=2)).status_code == 201

    profile = (await api.get(f"/doctors/{doctor.id}")).json()
    assert profile["rating"] == 3.5
    assert profile["reviewCount"] == 2


async def test_review_shows_on_appointment(api, patient, completed):
    appt_id = await completed(patient)
    await review(api, patient, appt_id, rating=5, comment="Great")

    items = (await api.get("/appointments/me", headers=patient.headers)).json()["data"]
    assert items[0]["review"] == {"rating": 5, "comment": "Great"}


async def test_one_review_per_patient_and_doctor(api, patient, completed):
    first = await completed(patient, at="09:00")
    second = await completed(patient, at="10:00")

    assert (await review(api, patient, first)).status_code == 201

    again = await review(api, patient, first)
    assert again.status_code == 409
    assert again.json()["detail"] == "already_reviewed"

    # a different appointment with the same doctor is still a duplicate
    other_appt = await review(api, patient, second)
    assert other_appt.status_code == 409


async def test_cannot_review_unfinished_appointment(api, book, patient, doctor, hospital, set_availability):
    await set_availability(doctor, [(1, "09:00", "11:00")])
    appt_id = (await book(patient, doctor, hospital, f"{MONDAY.isoformat()}T09:00:00")).json()["data"]["id"]

    resp = await review(api, patient, appt_id)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "appointment_not_completed"


async def test_only_the_appointment_patient_reviews(api, register, patient, doctor, completed):
    appt_id = await completed(patient)
    stranger = await register("stranger@example.com")

    assert (await review(api, stranger, appt_id)).status_code == 403
    assert (await review(api, doctor, appt_id)).status_code == 403


async def test_rating_bounds(api, patient, completed):
    appt_id = await completed(patient)
    assert (await review(api, patient, appt_id, rating=0)).status_code == 422
    assert (await review(api, patient, appt_id, rating=6)).status_code == 422


async def test_review_for_unknown_appointment(api, patient):
    resp = await review(api, patient, patient.id)
    assert resp.status_code == 404
