import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Must be set before database.py / main.py are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "filament-inventory-test-logs"))
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from crud import brand as crud_brand
from crud import consumable_type as crud_consumable_type
from crud.accessory_category import ensure_preset_categories, get_categories
from database import Base, get_db
from schemas.brand import BrandCreate
from schemas.consumable_type import ConsumableTypeCreate
from utils.auth_utils import ALGORITHM, SECRET_KEY

OWNER = "owner-1"
OTHER_OWNER = "owner-2"


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    ensure_preset_categories(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db):
    from main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides = {}


def make_token(sub=OWNER, **claims):
    return jwt.encode({"sub": sub, **claims}, SECRET_KEY, algorithm=ALGORITHM)


@pytest.fixture
def headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def other_headers():
    return {"Authorization": f"Bearer {make_token(OTHER_OWNER)}"}


@pytest.fixture
def brand(db):
    return crud_brand.create_brand(db, BrandCreate(name="Bambu Lab"), OWNER)


@pytest.fixture
def pla(db):
    return crud_consumable_type.create_consumable_type(db, ConsumableTypeCreate(name="PLA"), OWNER)


@pytest.fixture
def nozzle_category(db):
    return next(c for c in get_categories(db, OWNER) if c.name == "Nozzles")


@pytest.fixture
def spool_payload(brand, pla):
    return {
        "brand_id": brand.id,
        "type_id": pla.id,
        "color": "Red",
        "color_hex": "#FF0000",
        "weight": 1000,
        "price": 79.0,
        "purchase_date": "2026-01-05",
    }
