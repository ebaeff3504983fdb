"""
Shared fixtures: full relay settings, an in-memory registry and an API client.
"""

from datetime import date
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cardano.config import Settings
from database.connection import get_session
from database.crud import create_batch
from database.models import Base
from service.api import create_app

PRIMARY_SEED = "seed-originating-wallet"
SECONDARY_SEED = "seed-processor-wallet"
PROCESSOR_ADDRESS = "addr_test1qq63rds7cr2e7vq2jz2qrf66flk9qaunqvs7htjtsgg84sq"
TRANSFER_URL = "https://ledger.example/transfer"
MINT_URL = "https://ledger.example/mint"


@pytest.fixture
def settings():
    return Settings(
        transfer_api_url=TRANSFER_URL,
        mint_api_url=MINT_URL,
        blockfrost_key="preprodBlockfrostKey",
        secret_seed=PRIMARY_SEED,
        processor_secret_seed=SECONDARY_SEED,
        processor_wallet_address=PROCESSOR_ADDRESS,
        cbor_hex="4e4d01000033222220051200120011",
        cardano_network="preprod",
        transfer_timeout=5.0,
    )


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(settings, db_session):
    app = create_app(settings)

    def override_session():
        yield db_session

    app.dependency_overrides[get_session] = override_session
    return TestClient(app)


@pytest.fixture
def harvest_batch(db_session):
    return create_batch(db_session, {
        "initial_weight_kg": 120.0,
        "variety": "Heirloom",
        "process": "Washed",
        "harvest_date": date(2025, 11, 3),
        "location": "Guji Zone",
        "gps": "5.8500, 39.0500",
        "farmer_name": "Abebe Bekele",
    })


def upstream_response(status_code=200, text=""):
    """Stand-in for a requests.Response from the ledger services."""
    return Mock(status_code=status_code, text=text)
