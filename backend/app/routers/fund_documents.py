"""Fund Documents 기능 API 라우터입니다. 문서 생성, 버전 조회/삭제, 버전 비교 요청을 서비스 레이어로 위임합니다."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.schemas.diff import DocumentDiff
from app.schemas.fund_document import (
    DuplicateCheckOut,
    FundDocumentOut,
    GenerateRequest,
    GenerateResult,
    PreviewOut,
)
from app.services import fund_document_service
from app.middleware.auth_middleware import require_roles
from app.models.user import User

router = APIRouter(prefix="/api/admin/funds/{fund_id}/generated-documents", tags=["fund-documents"])


@router.get("", response_model=List[FundDocumentOut])
def list_fund_documents(
    fund_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    rows = fund_document_service.list_fund_documents(db, fund_id)
    return [fund_document_service.snapshot_dict(row) for row in rows]


@router.post("/{doc_type}", response_model=GenerateResult)
def generate_document(
    fund_id: int,
    doc_type: str,
    data: Optional[GenerateRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    data = data or GenerateRequest()
    return fund_document_service.generate(
        db,
        fund_id,
        doc_type,
        current_user,
        modified_content=data.modified_content,
        modified_appendix=data.modified_appendix,
        change_description=data.change_description,
    )


@router.get("/{doc_type}/preview", response_model=PreviewOut)
def preview_document(
    fund_id: int,
    doc_type: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    fund_document_service.ensure_document_type(doc_type)
    return fund_document_service.preview(db, fund_id, doc_type, current_user)


@router.get("/{doc_type}/check-duplicate", response_model=DuplicateCheckOut)
def check_duplicate(
    fund_id: int,
    doc_type: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    fund_document_service.ensure_document_type(doc_type)
    return DuplicateCheckOut(is_duplicate=fund_document_service.check_duplicate(db, fund_id, doc_type, current_user))


@router.get("/{doc_type}/versions", response_model=List[FundDocumentOut])
def list_versions(
    fund_id: int,
    doc_type: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    fund_document_service.ensure_document_type(doc_type)
    rows = fund_document_service.list_versions(db, fund_id, doc_type)
    return [fund_document_service.snapshot_dict(row) for row in rows]


@router.get("/{doc_type}/active", response_model=Optional[FundDocumentOut])
def get_active_document(
    fund_id: int,
    doc_type: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    fund_document_service.ensure_document_type(doc_type)
    row = fund_document_service.get_active_document(db, fund_id, doc_type)
    return fund_document_service.snapshot_dict(row) if row else None


@router.get("/{doc_type}/diff", response_model=DocumentDiff)
def diff_documents(
    fund_id: int,
    doc_type: str,
    from_id: int = Query(..., alias="from"),
    to_id: int = Query(..., alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    fund_document_service.ensure_document_type(doc_type)
    return fund_document_service.compare_document_versions(db, fund_id, from_id, to_id, doc_type)


@router.get("/{doc_type}/{document_id}", response_model=FundDocumentOut)
def get_document(
    fund_id: int,
    doc_type: str,
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    fund_document_service.ensure_document_type(doc_type)
    row = fund_document_service.get_fund_document(db, fund_id, document_id, doc_type)
    return fund_document_service.snapshot_dict(row)


@router.delete("/{doc_type}/{document_id}")
def delete_document(
    fund_id: int,
    doc_type: str,
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    fund_document_service.ensure_document_type(doc_type)
    fund_document_service.delete_document(db, fund_id, document_id, doc_type)
    return {"message": "삭제되었습니다."}
