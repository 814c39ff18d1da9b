"""Template Service 도메인 서비스 레이어입니다. 문서 템플릿 버전 저장/활성화/비교를 담당합니다."""

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.config import settings
from app.models.document_template import DocumentTemplate
from app.schemas.diff import DocumentDiff, TemplateUpdateAnalysis
from app.services.display_paths import TEMPLATE_DOCUMENT
from app.services.document_diff import diff_payloads
from app.services.template_versioning import (
    analyze_template_changes,
    calculate_next_version,
    generate_change_description,
)
from app.utils.helpers import dump_json, load_json
from app.utils.json_diff import TEMPLATE_EXCLUDED_FIELDS

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


def _scope_filter(query, fund_id: Optional[int]):
    if fund_id is None:
        return query.filter(DocumentTemplate.fund_id.is_(None))
    return query.filter(DocumentTemplate.fund_id == fund_id)


def get_template(db: Session, template_id: int) -> DocumentTemplate:
    row = db.query(DocumentTemplate).filter(DocumentTemplate.template_id == template_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="템플릿을 찾을 수 없습니다.")
    return row


def list_templates(db: Session, doc_type: str, fund_id: Optional[int] = None) -> List[DocumentTemplate]:
    q = db.query(DocumentTemplate).filter(DocumentTemplate.type == doc_type)
    return (
        _scope_filter(q, fund_id)
        .order_by(DocumentTemplate.created_at.desc(), DocumentTemplate.template_id.desc())
        .all()
    )


def get_active_template(db: Session, doc_type: str, fund_id: Optional[int] = None) -> Optional[DocumentTemplate]:
    """펀드별 활성 템플릿을 먼저 찾고, 없으면 글로벌 활성 템플릿을 돌려준다."""
    scopes = [fund_id, None] if fund_id is not None else [None]
    for scope in scopes:
        q = db.query(DocumentTemplate).filter(
            DocumentTemplate.type == doc_type,
            DocumentTemplate.is_active == True,
        )
        row = _scope_filter(q, scope).order_by(DocumentTemplate.template_id.desc()).first()
        if row:
            return row
    return None


def load_default_template(doc_type: str) -> Optional[Dict[str, Any]]:
    """``TEMPLATE_DIR/<type>.json`` 에 번들된 기본 템플릿을 읽는다."""
    path = os.path.join(settings.TEMPLATE_DIR, f"{doc_type}.json")
    if not os.path.exists(path):
        return None
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _deactivate_scope(db: Session, doc_type: str, fund_id: Optional[int]) -> None:
    q = db.query(DocumentTemplate).filter(
        DocumentTemplate.type == doc_type,
        DocumentTemplate.is_active == True,
    )
    _scope_filter(q, fund_id).update({DocumentTemplate.is_active: False}, synchronize_session=False)


def create_template(
    db: Session,
    *,
    doc_type: str,
    version: str,
    content: Dict[str, Any],
    appendix: Any = None,
    description: Optional[str] = None,
    is_active: bool = False,
    fund_id: Optional[int] = None,
    created_by: Optional[int] = None,
) -> DocumentTemplate:
    if not VERSION_PATTERN.match(version or ""):
        raise HTTPException(status_code=400, detail="버전은 major.minor.patch 형식이어야 합니다.")

    q = db.query(DocumentTemplate.template_id).filter(
        DocumentTemplate.type == doc_type,
        DocumentTemplate.version == version,
    )
    if _scope_filter(q, fund_id).first():
        raise HTTPException(status_code=409, detail=f"템플릿 버전 {version}이(가) 이미 존재합니다.")

    if is_active:
        _deactivate_scope(db, doc_type, fund_id)

    row = DocumentTemplate(
        type=doc_type,
        version=version,
        content=dump_json(content),
        appendix=dump_json(appendix) if appendix is not None else None,
        description=description,
        is_active=is_active,
        fund_id=fund_id,
        created_by=created_by,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("[templates] created type=%s version=%s fund_id=%s active=%s", doc_type, version, fund_id, is_active)
    return row


def activate_template(db: Session, template_id: int) -> DocumentTemplate:
    row = get_template(db, template_id)
    _deactivate_scope(db, row.type, row.fund_id)
    row.is_active = True
    db.commit()
    db.refresh(row)
    logger.info("[templates] activated type=%s version=%s fund_id=%s", row.type, row.version, row.fund_id)
    return row


def update_template(
    db: Session,
    template_id: int,
    *,
    content: Optional[Dict[str, Any]] = None,
    description: Optional[str] = None,
) -> DocumentTemplate:
    row = get_template(db, template_id)
    if content is not None:
        row.content = dump_json(content)
    if description is not None:
        row.description = description
    db.commit()
    db.refresh(row)
    return row


def analyze_template_update(
    db: Session,
    doc_type: str,
    content: Dict[str, Any],
    fund_id: Optional[int] = None,
) -> TemplateUpdateAnalysis:
    base = get_active_template(db, doc_type, fund_id)
    if not base:
        raise HTTPException(status_code=404, detail="기준이 되는 활성 템플릿이 없습니다.")
    changes = analyze_template_changes(load_json(base.content, {}), content)
    return TemplateUpdateAnalysis(
        current_version=base.version,
        next_version=calculate_next_version(base.version, changes),
        description=generate_change_description(changes),
        changes=changes,
    )


def create_template_version(
    db: Session,
    *,
    doc_type: str,
    content: Dict[str, Any],
    appendix: Any = None,
    description: Optional[str] = None,
    version: Optional[str] = None,
    fund_id: Optional[int] = None,
    created_by: Optional[int] = None,
    activate: bool = True,
) -> DocumentTemplate:
    """수정된 본문을 새 템플릿 버전으로 저장한다. 버전이 없으면 변경 깊이로 계산한다."""
    if version is None:
        base = get_active_template(db, doc_type, fund_id)
        if base is None:
            version = settings.DEFAULT_TEMPLATE_VERSION
        else:
            changes = analyze_template_changes(load_json(base.content, {}), content)
            if not changes:
                raise HTTPException(status_code=400, detail="본문 변경사항이 없습니다. 버전을 직접 지정해 주세요.")
            version = calculate_next_version(base.version, changes)
            description = description or generate_change_description(changes)

    return create_template(
        db,
        doc_type=doc_type,
        version=version,
        content=content,
        appendix=appendix,
        description=description,
        is_active=activate,
        fund_id=fund_id,
        created_by=created_by,
    )


def compare_template_versions(db: Session, from_template_id: int, to_template_id: int) -> DocumentDiff:
    from_row = get_template(db, from_template_id)
    to_row = get_template(db, to_template_id)
    if from_row.type != to_row.type:
        raise HTTPException(status_code=400, detail="다른 타입의 템플릿은 비교할 수 없습니다.")

    return diff_payloads(
        {"content": load_json(from_row.content, {}), "appendix": load_json(from_row.appendix)},
        {"content": load_json(to_row.content, {}), "appendix": load_json(to_row.appendix)},
        from_version=from_row.version,
        to_version=to_row.version,
        excluded_fields=TEMPLATE_EXCLUDED_FIELDS,
        document_type=TEMPLATE_DOCUMENT,
    )


def to_response(row: DocumentTemplate) -> Dict[str, Any]:
    return {
        "template_id": row.template_id,
        "type": row.type,
        "version": row.version,
        "content": load_json(row.content, {}),
        "appendix": load_json(row.appendix),
        "description": row.description,
        "is_active": bool(row.is_active),
        "fund_id": row.fund_id,
        "created_by": row.created_by,
        "created_at": row.created_at,
    }
