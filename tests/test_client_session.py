import json
from datetime import date

import httpx
import pytest

from medlink.client.api import MedLinkClient
from medlink.client.errors import AuthError, NotFoundError, UnknownError, ValidationError
from medlink.client.session import FileSessionStore, MemorySessionStore, Session
from tests.conftest import PASSWORD


def test_file_store_roundtrip_and_clear(tmp_path):
    store = FileSessionStore(tmp_path / "nested" / "session.json")
    session = Session.load(store)
    assert not session.is_authenticated

    session.start("tok", {"id": "u1", "role": "DOCTOR"})
    restored = Session.load(FileSessionStore(tmp_path / "nested" / "session.json"))
    assert restored.token == "tok"
    assert restored.role == "doctor"

    restored.clear()
    assert not (tmp_path / "nested" / "session.json").exists()
    assert restored.user is None


def test_corrupt_session_file_is_discarded(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")

    session = Session.load(FileSessionStore(path))
    assert not session.is_authenticated
    assert not path.exists()


def test_incomplete_session_is_ignored():
    store = MemorySessionStore({"token": "tok"})
    assert Session.load(store).token is None


def test_start_requires_token_and_user():
    with pytest.raises(ValueError):
        Session(MemorySessionStore()).start("", {"id": "x"})


@pytest.fixture
async def client(transport):
    async with MedLinkClient(
        Session(MemorySessionStore()), base_url="http://test/api", transport=transport
    ) as c:
        yield c


async def test_login_stores_session(client, patient):
    user = await client.login(patient.email, PASSWORD)
    assert user["id"] == patient.id
    assert client.session.token
    assert client.session.role == "patient"


async def test_401_clears_session(client, patient):
    client.session.start("expired-token", {"id": patient.id, "role": "patient"})

    with pytest.raises(AuthError):
        await client.list_my_appointments()
    assert not client.session.is_authenticated


async def test_bad_credentials_raise_auth_error(client, patient):
    with pytest.raises(AuthError) as exc:
        await client.login(patient.email, "Wrong1234")
    assert exc.value.message == "invalid_credentials"


async def test_status_codes_map_to_taxonomy(client, patient, doctor):
    await client.login(patient.email, PASSWORD)

    with pytest.raises(NotFoundError):
        await client.get_available_slots(patient.id, date(2030, 1, 7))

    with pytest.raises(ValidationError) as exc:
        await client.update_appointment_status(doctor.id, "NOT_A_STATUS")
    assert exc.value.status_code == 422


async def test_transport_failure_is_unknown_error():
    def boom(request):
        raise httpx.ConnectError("refused", request=request)

    async with MedLinkClient(
        Session(MemorySessionStore()),
        base_url="http://test/api",
        transport=httpx.MockTransport(boom),
    ) as client:
        with pytest.raises(UnknownError):
            await client.list_my_appointments()


async def test_server_error_is_unknown_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="oops"))
    async with MedLinkClient(
        Session(MemorySessionStore()), base_url="http://test/api", transport=transport
    ) as client:
        with pytest.raises(UnknownError) as exc:
            await client.list_my_appointments()
    assert exc.value.status_code == 500


async def test_bearer_header_is_attached():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        seen["url"] = str(request.url)
        return httpx.Response(200, content=json.dumps({"data": []}))

    session = Session(MemorySessionStore())
    session.start("abc", {"id": "u1", "role": "doctor"})
    async with MedLinkClient(session, base_url="http://test/api", transport=httpx.MockTransport(handler)) as client:
        await client.list_my_appointments("doctor")

    assert seen["auth"] == "Bearer abc"
    assert seen["url"] == "http://test/api/appointments/me?role=DOCTOR"
