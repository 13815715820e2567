# tests/conftest.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict

import pytest
from httpx import ASGITransport, AsyncClient

from medlink.core.security import hash_password
from medlink.db.sql import build_engine, build_sessionmaker, get_session, init_db
from medlink.main import create_app
from medlink.modules.users import repository as users_repo

PASSWORD = "Passw0rd!"

# 2030-01-07 is a Monday, 2030-01-08 a Tuesday
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)


@dataclass
class Account:
    id: str
    email: str
    role: str
    token: str

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
async def engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'medlink-test.db'}")
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
def app(session_factory):
    app = create_app(with_lifespan=False)

    async def _get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_session
    return app


@pytest.fixture
def transport(app):
    return ASGITransport(app=app)


@pytest.fixture
async def api(transport):
    async with AsyncClient(transport=transport, base_url="http://test/api") as client:
        yield client


async def login(api: AsyncClient, email: str, password: str = PASSWORD) -> Account:
    resp = await api.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    return Account(id=body["user"]["id"], email=email, role=body["user"]["role"], token=body["access_token"])


@pytest.fixture
def register(api):
    async def _register(email: str, role: str = "patient", first_name: str = "Test", last_name: str = "User") -> Account:
        resp = await api.post(
            "/auth/register",
            json={
                "email": email,
                "password": PASSWORD,
                "firstName": first_name,
                "lastName": last_name,
                "role": role,
            },
        )
        assert resp.status_code == 201, resp.text
        return await login(api, email)

    return _register


@pytest.fixture
async def patient(register) -> Account:
    return await register("patient@example.com")


@pytest.fixture
async def doctor(register) -> Account:
    return await register("doctor@example.com", role="doctor", first_name="Greg", last_name="House")


@pytest.fixture
async def admin(api, session_factory) -> Account:
    # Admins cannot sign up through the API
    async with session_factory() as session:
        await users_repo.create_user(
            session,
            email="admin@example.com",
            password_hash=hash_password(PASSWORD),
            first_name="Ada",
            last_name="Admin",
            role="admin",
        )
        await session.commit()
    return await login(api, "admin@example.com")


@pytest.fixture
def create_hospital(api, admin):
    async def _create(name: str = "Princeton-Plainsboro", city: str = "Princeton") -> dict:
        resp = await api.post(
            "/hospitals",
            json={"name": name, "city": city, "address": "1 Main St"},
            headers=admin.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create


@pytest.fixture
def link_hospital(api, admin):
    async def _link(doctor: Account, hospital: dict) -> dict:
        resp = await api.post(f"/doctors/{doctor.id}/hospitals/{hospital['id']}", headers=admin.headers)
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _link


@pytest.fixture
async def hospital(create_hospital, link_hospital, doctor) -> dict:
    """A hospital the `doctor` fixture practices at."""
    hosp = await create_hospital()
    await link_hospital(doctor, hosp)
    return hosp


@pytest.fixture
def set_availability(api):
    async def _set(doctor: Account, windows) -> dict:
        resp = await api.put(
            "/doctor/availability",
            json={
                "availability": [
                    {"dayOfWeek": d, "startTime": s, "endTime": e} for d, s, e in windows
                ]
            },
            headers=doctor.headers,
        )
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _set


@pytest.fixture
def book(api):
    async def _book(patient: Account, doctor: Account, hospital: dict, when: str, **extra):
        return await api.post(
            "/appointments",
            json={"doctorId": doctor.id, "hospitalId": hospital["id"], "date": when, **extra},
            headers=patient.headers,
        )

    return _book
