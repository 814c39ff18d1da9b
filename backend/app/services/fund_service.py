"""Fund Service 도메인 서비스 레이어입니다. 펀드 기본 정보와 조합원 명부를 관리합니다."""

from typing import List

from sqlalchemy.orm import Session
from fastapi import HTTPException
from app.models.fund import Fund, FundMember
from app.schemas.fund import FundCreate, FundUpdate, FundMemberCreate
from app.services.document_context import get_fund_or_404


def get_funds(db: Session) -> List[Fund]:
    return db.query(Fund).order_by(Fund.created_at.desc(), Fund.fund_id.desc()).all()


def get_fund(db: Session, fund_id: int) -> Fund:
    return get_fund_or_404(db, fund_id)


def create_fund(db: Session, data: FundCreate) -> Fund:
    fund = Fund(**data.model_dump())
    db.add(fund)
    db.commit()
    db.refresh(fund)
    return fund


def update_fund(db: Session, fund_id: int, data: FundUpdate) -> Fund:
    fund = get_fund_or_404(db, fund_id)
    for k, v in data.model_dump(exclude_none=True).items():
        setattr(fund, k, v)
    db.commit()
    db.refresh(fund)
    return fund


def get_members(db: Session, fund_id: int) -> List[FundMember]:
    get_fund_or_404(db, fund_id)
    return (
        db.query(FundMember)
        .filter(FundMember.fund_id == fund_id)
        .order_by(FundMember.member_type.asc(), FundMember.member_id.asc())
        .all()
    )


def add_member(db: Session, fund_id: int, data: FundMemberCreate) -> FundMember:
    get_fund_or_404(db, fund_id)
    if data.member_type not in ("GP", "LP"):
        raise HTTPException(status_code=400, detail="조합원 구분은 GP 또는 LP여야 합니다.")
    member = FundMember(fund_id=fund_id, **data.model_dump())
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def delete_member(db: Session, fund_id: int, member_id: int) -> None:
    member = (
        db.query(FundMember)
        .filter(FundMember.fund_id == fund_id, FundMember.member_id == member_id)
        .first()
    )
    if not member:
        raise HTTPException(status_code=404, detail="조합원을 찾을 수 없습니다.")
    db.delete(member)
    db.commit()
