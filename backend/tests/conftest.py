import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.database import Base, get_db
from app.main import app
from app.models.user import User
from app.models.fund import Fund, FundMember
from datetime import date

TEST_DB_URL = "sqlite:///./test_fund_documents.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        "admin": User(email="admin@fund.test", name="관리자", role="admin", phone="010-0000-0000"),
        "member": User(email="member@fund.test", name="조합원", role="member"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def seed_fund(db, seed_users):
    fund = Fund(
        name="프로펠 제1호 벤처투자조합",
        abbreviation="프로펠1호",
        address="서울특별시 강남구 테헤란로 1",
        par_value=1000000,
        total_cap=1500000000,
        initial_cap=500000000,
        payment_schedule="lump_sum",
        duration=5,
        closed_at=date(2026, 3, 2),
    )
    db.add(fund)
    db.commit()
    db.refresh(fund)
    members = [
        FundMember(fund_id=fund.fund_id, name="프로펠벤처스", member_type="GP", entity_type="corporate",
                   email="gp@fund.test", business_number="123-45-67890", total_units=100, total_amount=100000000),
        FundMember(fund_id=fund.fund_id, name="김출자", member_type="LP", email="lp1@fund.test",
                   birth_date="1980-01-01", total_units=700, total_amount=700000000),
        FundMember(fund_id=fund.fund_id, name="이출자", member_type="LP", email="lp2@fund.test",
                   birth_date="1985-05-05", total_units=700, total_amount=700000000),
    ]
    for m in members:
        db.add(m)
    db.commit()
    return fund


def get_token(client, email: str) -> str:
    resp = client.post("/api/auth/login", json={"email": email})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}
