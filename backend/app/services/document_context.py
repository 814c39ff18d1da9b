"""문서 생성에 필요한 컨텍스트(펀드 정보, 조합원 스냅샷, 생성 시각)를 구성합니다."""

from datetime import datetime
from typing import Any, Dict, List

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.fund import Fund, FundMember
from app.models.user import User


def get_fund_or_404(db: Session, fund_id: int) -> Fund:
    fund = db.query(Fund).filter(Fund.fund_id == fund_id).first()
    if not fund:
        raise HTTPException(status_code=404, detail="펀드를 찾을 수 없습니다.")
    return fund


def _member_snapshot(member: FundMember) -> Dict[str, Any]:
    return {
        "id": member.member_id,
        "name": member.name,
        "member_type": member.member_type,
        "entity_type": member.entity_type,
        "email": member.email,
        "phone": member.phone,
        "address": member.address,
        "birth_date": member.birth_date,
        "business_number": member.business_number,
        "total_units": member.total_units or 0,
        "total_amount": member.total_amount or 0,
        "initial_amount": member.initial_amount or 0,
    }


def list_member_snapshots(db: Session, fund_id: int) -> List[Dict[str, Any]]:
    members = (
        db.query(FundMember)
        .filter(FundMember.fund_id == fund_id)
        .order_by(FundMember.member_type.asc(), FundMember.member_id.asc())
        .all()
    )
    return [_member_snapshot(m) for m in members]


def build_document_context(db: Session, fund_id: int, user: User, is_preview: bool = False) -> Dict[str, Any]:
    fund = get_fund_or_404(db, fund_id)
    if not fund.closed_at:
        raise HTTPException(status_code=400, detail="결성일 정보가 없습니다. 기본 정보에서 입력해 주세요.")

    return {
        "fund": {
            "id": fund.fund_id,
            "name": fund.name,
            "nameShort": fund.abbreviation,
            "address": fund.address,
            "par_value": fund.par_value,
            "total_cap": fund.total_cap,
            "initial_cap": fund.initial_cap,
            "payment_schedule": fund.payment_schedule,
            "duration": fund.duration,
            "closed_at": fund.closed_at.isoformat(),
        },
        "user": {
            "id": user.user_id,
            "name": user.name,
            "email": user.email,
            "phone": user.phone or "",
        },
        "members": list_member_snapshots(db, fund_id),
        "generatedAt": datetime.utcnow().isoformat(),
        "isPreview": is_preview,
    }
