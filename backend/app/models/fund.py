"""펀드(조합)와 조합원 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, BigInteger, String, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class Fund(Base):
    __tablename__ = "funds"

    fund_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    abbreviation = Column(String(100))
    address = Column(String(300))
    par_value = Column(BigInteger)  # 출자 1좌당 금액
    total_cap = Column(BigInteger)
    initial_cap = Column(BigInteger)
    payment_schedule = Column(String(20))  # lump_sum/capital_call
    duration = Column(Integer)  # 존속기간(년)
    closed_at = Column(Date)  # 결성일
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    members = relationship("FundMember", back_populates="fund", cascade="all, delete-orphan")
    documents = relationship("FundDocument", back_populates="fund", cascade="all, delete-orphan")


class FundMember(Base):
    __tablename__ = "fund_members"

    member_id = Column(Integer, primary_key=True, autoincrement=True)
    fund_id = Column(Integer, ForeignKey("funds.fund_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    name = Column(String(100), nullable=False)
    member_type = Column(String(10), nullable=False)  # GP/LP
    entity_type = Column(String(20), default="individual")  # individual/corporate
    email = Column(String(100))
    phone = Column(String(30))
    address = Column(String(300))
    birth_date = Column(String(20))
    business_number = Column(String(20))
    total_units = Column(Integer, default=0)
    total_amount = Column(BigInteger, default=0)
    initial_amount = Column(BigInteger, default=0)
    created_at = Column(DateTime, server_default=func.now())

    fund = relationship("Fund", back_populates="members")
    user = relationship("User", back_populates="fund_memberships")

    __table_args__ = (
        Index("idx_fund_member_fund", "fund_id", "member_type"),
    )
