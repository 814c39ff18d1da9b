"""Fund 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime


class FundBase(BaseModel):
    name: str
    abbreviation: Optional[str] = None
    address: Optional[str] = None
    par_value: Optional[int] = None
    total_cap: Optional[int] = None
    initial_cap: Optional[int] = None
    payment_schedule: Optional[str] = None
    duration: Optional[int] = None
    closed_at: Optional[date] = None


class FundCreate(FundBase):
    pass


class FundUpdate(BaseModel):
    name: Optional[str] = None
    abbreviation: Optional[str] = None
    address: Optional[str] = None
    par_value: Optional[int] = None
    total_cap: Optional[int] = None
    initial_cap: Optional[int] = None
    payment_schedule: Optional[str] = None
    duration: Optional[int] = None
    closed_at: Optional[date] = None


class FundOut(FundBase):
    fund_id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class FundMemberBase(BaseModel):
    name: str
    member_type: str  # GP/LP
    entity_type: str = "individual"
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    birth_date: Optional[str] = None
    business_number: Optional[str] = None
    total_units: int = 0
    total_amount: int = 0
    initial_amount: int = 0


class FundMemberCreate(FundMemberBase):
    user_id: Optional[int] = None


class FundMemberOut(FundMemberBase):
    member_id: int
    fund_id: int
    user_id: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}
