"""Funds 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.schemas.fund import FundCreate, FundUpdate, FundOut, FundMemberCreate, FundMemberOut
from app.services import fund_service
from app.middleware.auth_middleware import get_current_user, require_roles
from app.models.user import User

router = APIRouter(prefix="/api/funds", tags=["funds"])


@router.get("", response_model=List[FundOut])
def list_funds(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return fund_service.get_funds(db)


@router.post("", response_model=FundOut)
def create_fund(
    data: FundCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    return fund_service.create_fund(db, data)


@router.get("/{fund_id}", response_model=FundOut)
def get_fund(fund_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return fund_service.get_fund(db, fund_id)


@router.put("/{fund_id}", response_model=FundOut)
def update_fund(
    fund_id: int,
    data: FundUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    return fund_service.update_fund(db, fund_id, data)


@router.get("/{fund_id}/members", response_model=List[FundMemberOut])
def list_members(fund_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return fund_service.get_members(db, fund_id)


@router.post("/{fund_id}/members", response_model=FundMemberOut)
def add_member(
    fund_id: int,
    data: FundMemberCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    return fund_service.add_member(db, fund_id, data)


@router.delete("/{fund_id}/members/{member_id}")
def delete_member(
    fund_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    fund_service.delete_member(db, fund_id, member_id)
    return {"message": "삭제되었습니다."}
