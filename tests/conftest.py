"""
Shared fixtures: in-memory database, API client and signed-in sessions
"""

import hashlib
import os

# Settings are read at import time, so pin them before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PAYHERE_MERCHANT_ID"] = "1211149"
os.environ["PAYHERE_MERCHANT_SECRET"] = "test-merchant-secret"
os.environ["PAYHERE_CURRENCY"] = "LKR"
os.environ["TAX_RATE"] = "0.10"
os.environ["SMS_PROVIDER"] = "notify.lk"
os.environ["SMS_USER_ID"] = ""
os.environ["SMS_API_KEY"] = ""
os.environ["SMS_PASSWORD"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.auth.auth_handler import auth_handler
from app.models import Customer, MenuItem, RestaurantTable, StaffUser
from main import app

MERCHANT_ID = os.environ["PAYHERE_MERCHANT_ID"]
MERCHANT_SECRET = os.environ["PAYHERE_MERCHANT_SECRET"]

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(autouse=True)
def reset_database():
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
def client():
    return TestClient(app)

@pytest.fixture
def menu_item(db_session):
    item = MenuItem(id="A", name="Chicken Kottu", price=500.0, category="mains", preparation_time=15)
    db_session.add(item)
    db_session.commit()
    db_session.refresh(item)
    return item

@pytest.fixture
def restaurant_table(db_session):
    table = RestaurantTable(table_number="T5", capacity=4)
    db_session.add(table)
    db_session.commit()
    db_session.refresh(table)
    return table

@pytest.fixture
def customer(db_session):
    customer = Customer(name="Nimal Perera", phone="+94771234567")
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer

@pytest.fixture
def customer_headers(customer):
    token = auth_handler.create_customer_token(customer, "takeaway")
    return {"Authorization": f"Bearer {token}"}

def make_staff(db_session, role="kitchen", email="kitchen@dineeasy.lk"):
    # Token-only fixture, the password is never checked
    staff = StaffUser(email=email, password_hash="not-a-real-hash", full_name="Kitchen Staff", role=role)
    db_session.add(staff)
    db_session.commit()
    db_session.refresh(staff)
    return staff

@pytest.fixture
def staff_headers(db_session):
    staff = make_staff(db_session)
    return {"Authorization": f"Bearer {auth_handler.create_staff_token(staff)}"}

def md5_upper(value: str) -> str:
    return hashlib.md5(value.encode()).hexdigest().upper()

def sign_callback(order_id: str, amount: str, status_code: str, currency: str = "LKR",
                  merchant_id: str = MERCHANT_ID, secret: str = MERCHANT_SECRET) -> dict:
    """A PayHere notify payload signed the way the gateway signs it"""
    signature = md5_upper(f"{merchant_id}{order_id}{amount}{currency}{status_code}{md5_upper(secret)}")
    return {
        "merchant_id": merchant_id,
        "order_id": order_id,
        "payment_id": "320025071278",
        "payhere_amount": amount,
        "payhere_currency": currency,
        "status_code": status_code,
        "md5sig": signature,
    }
