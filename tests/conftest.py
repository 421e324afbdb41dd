# tests/conftest.py
import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from vahaan.db import Base, engine, SessionLocal
from vahaan.main import app


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def listing_payload():
    def make(**overrides):
        payload = {
            "name": "Pulsar 150",
            "brand": "Bajaj",
            "model": "NS",
            "year": 2021,
            "daysUsed": 400,
            "condition": "Good",
            "mileage": 12000,
            "presentPrice": 150000,
            "pastPrice": 200000,
            "license": "mh12ab1234",
            "type": "Petrol",
            "engineCapacity": "150cc",
            "topSpeed": 120,
            "description": "Single owner, serviced on time",
            "sellerName": "Ravi Kumar",
            "sellerEmail": "Ravi@Example.com",
            "sellerPhone": "9876543210",
        }
        payload.update(overrides)
        return {k: v for k, v in payload.items() if v is not None}
    return make


@pytest.fixture
def create_listing(client, listing_payload):
    def create(kind="bikes", **overrides):
        resp = client.post(f"/api/{kind}", json=listing_payload(**overrides))
        assert resp.status_code == 201, resp.json()
        return resp.json()["data"]
    return create
