from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base, get_db
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def client():
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: startup would run migrations and the scheduler
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def this_year():
    return date.today().year


@pytest.fixture
def company(client):
    response = client.post("/api/v1/companies/", json={
        "name": "Acme Pumps",
        "contact_name": "Dana Ruiz",
        "email": "dana@acmepumps.com",
        "phone": "555-0101",
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def other_company(client):
    response = client.post("/api/v1/companies/", json={"name": "Baltic Conveyors"})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def motor(client, company):
    response = client.post("/api/v1/motors/", json={
        "motor_id": "M-1042",
        "company_id": company["id"],
        "manufacturer": "Baldor",
        "model": "EM3710T",
        "serial_number": "Z1234567",
        "type": "AC induction",
        "horsepower": 7.5,
        "voltage": 460,
        "rpm": 1770,
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def technician(client):
    response = client.post("/api/v1/users/", json={
        "name": "Sam Okafor",
        "email": "sam@motorshop.com",
        "role": "technician",
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def make_job(client, company, motor):
    def _make_job(**overrides):
        payload = {
            "company_id": company["id"],
            "motor_id": motor["id"],
            "description": "Rewind stator and replace bearings",
        }
        payload.update(overrides)
        response = client.post("/api/v1/jobs/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _make_job


@pytest.fixture
def job(make_job):
    return make_job(labor_hours="4.5", labor_rate="85.00", parts_cost="120.25")
