"""Seed the database with a sample fund and the bundled global templates."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date
from app.database import SessionLocal, engine, Base
import app.models  # noqa: F401

from app.models.user import User
from app.models.fund import Fund, FundMember
from app.services import template_service
from app.services.fund_document_service import DOCUMENT_TYPES


def seed_templates(db):
    for doc_type in DOCUMENT_TYPES:
        if template_service.get_active_template(db, doc_type):
            continue
        bundled = template_service.load_default_template(doc_type)
        if not bundled:
            continue
        template_service.create_template(
            db,
            doc_type=doc_type,
            version=bundled.get("version") or "1.0.0",
            content=bundled["content"],
            appendix=bundled.get("appendix"),
            description=bundled.get("description"),
            is_active=True,
        )
        print(f"Template '{doc_type}' imported.")


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_templates(db)
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        users = [
            User(email="admin@propel.vc", name="관리자 김철수", role="admin", phone="02-555-0100"),
            User(email="lp1@example.com", name="조합원 정수연", role="member"),
        ]
        db.add_all(users)
        db.flush()

        fund = Fund(
            name="프로펠 제1호 벤처투자조합",
            abbreviation="프로펠1호",
            address="서울특별시 강남구 테헤란로 123",
            par_value=1000000,
            total_cap=2000000000,
            initial_cap=600000000,
            payment_schedule="capital_call",
            duration=7,
            closed_at=date(2026, 3, 2),
        )
        db.add(fund)
        db.flush()

        db.add_all([
            FundMember(fund_id=fund.fund_id, name="프로펠벤처스", member_type="GP", entity_type="corporate",
                       email="admin@propel.vc", business_number="123-45-67890",
                       total_units=100, total_amount=100000000, initial_amount=30000000),
            FundMember(fund_id=fund.fund_id, user_id=users[1].user_id, name="정수연", member_type="LP",
                       email="lp1@example.com", birth_date="1982-07-14",
                       total_units=1900, total_amount=1900000000, initial_amount=570000000),
        ])
        db.commit()
        print("Seed data created.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
