"""Templates 기능 API 라우터입니다. 문서 템플릿 버전 관리와 변경 분석 요청을 서비스 레이어로 위임합니다."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.schemas.diff import DocumentDiff, TemplateUpdateAnalysis
from app.schemas.document_template import (
    TemplateAnalyzeRequest,
    TemplateCreate,
    TemplateOut,
    TemplateUpdate,
    TemplateVersionCreate,
)
from app.services import template_service
from app.services.fund_document_service import ensure_document_type
from app.middleware.auth_middleware import require_roles
from app.models.user import User

router = APIRouter(prefix="/api/admin/templates", tags=["templates"])


@router.get("/{doc_type}", response_model=List[TemplateOut])
def list_templates(
    doc_type: str,
    fund_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    ensure_document_type(doc_type)
    return [template_service.to_response(row) for row in template_service.list_templates(db, doc_type, fund_id)]


@router.get("/{doc_type}/active", response_model=Optional[TemplateOut])
def get_active_template(
    doc_type: str,
    fund_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    ensure_document_type(doc_type)
    row = template_service.get_active_template(db, doc_type, fund_id)
    return template_service.to_response(row) if row else None


@router.post("/{doc_type}", response_model=TemplateOut)
def create_template(
    doc_type: str,
    data: TemplateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    ensure_document_type(doc_type)
    row = template_service.create_template(
        db,
        doc_type=doc_type,
        version=data.version,
        content=data.content,
        appendix=data.appendix,
        description=data.description,
        is_active=data.is_active,
        fund_id=data.fund_id,
        created_by=current_user.user_id,
    )
    return template_service.to_response(row)


@router.post("/{doc_type}/versions", response_model=TemplateOut)
def create_template_version(
    doc_type: str,
    data: TemplateVersionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    ensure_document_type(doc_type)
    row = template_service.create_template_version(
        db,
        doc_type=doc_type,
        content=data.content,
        appendix=data.appendix,
        description=data.description,
        version=data.version,
        fund_id=data.fund_id,
        created_by=current_user.user_id,
        activate=data.activate,
    )
    return template_service.to_response(row)


@router.post("/{doc_type}/analyze", response_model=TemplateUpdateAnalysis)
def analyze_template_update(
    doc_type: str,
    data: TemplateAnalyzeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    ensure_document_type(doc_type)
    return template_service.analyze_template_update(db, doc_type, data.content, data.fund_id)


@router.get("/{doc_type}/diff", response_model=DocumentDiff)
def diff_templates(
    doc_type: str,
    from_id: int = Query(..., alias="from"),
    to_id: int = Query(..., alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    ensure_document_type(doc_type)
    return template_service.compare_template_versions(db, from_id, to_id)


@router.get("/{doc_type}/{template_id}", response_model=TemplateOut)
def get_template(
    doc_type: str,
    template_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    return template_service.to_response(template_service.get_template(db, template_id))


@router.put("/{doc_type}/{template_id}", response_model=TemplateOut)
def update_template(
    doc_type: str,
    template_id: int,
    data: TemplateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    row = template_service.update_template(db, template_id, content=data.content, description=data.description)
    return template_service.to_response(row)


@router.post("/{doc_type}/{template_id}/activate", response_model=TemplateOut)
def activate_template(
    doc_type: str,
    template_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    return template_service.to_response(template_service.activate_template(db, template_id))
