"""Fund Document Service 도메인 서비스 레이어입니다.

펀드별 생성 문서의 버전 스냅샷 저장(append-only), 조회, 삭제, 중복 확인, 버전 비교와
문서 생성 파이프라인(템플릿 로드 → 변수 치환 → 새 버전 저장 → 직전 버전과 비교)을 담당합니다.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.fund_document import FundDocument
from app.models.user import User
from app.schemas.diff import DocumentDiff, TemplateChange
from app.services import template_service
from app.services.document_context import build_document_context, get_fund_or_404
from app.services.document_diff import compare_snapshots
from app.services.template_render import process_template
from app.services.template_versioning import (
    analyze_template_changes,
    calculate_next_version,
    generate_change_description,
)
from app.utils.helpers import dump_json, load_json
from app.utils.json_diff import canonical_json, sanitize_for_comparison

logger = logging.getLogger(__name__)

DOCUMENT_TYPES = ("lpa", "member_list", "lpa_consent_form", "personal_info_consent_form")
DIFF_UNAVAILABLE = "버전 비교를 할 수 없습니다."


def ensure_document_type(doc_type: str) -> str:
    if doc_type not in DOCUMENT_TYPES:
        raise HTTPException(status_code=400, detail="지원하지 않는 문서 종류입니다.")
    return doc_type


# --- Document store -----------------------------------------------------

def get_document(db: Session, document_id: int) -> FundDocument:
    row = db.query(FundDocument).filter(FundDocument.document_id == document_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="문서를 찾을 수 없습니다.")
    return row


def get_fund_document(
    db: Session, fund_id: int, document_id: int, doc_type: Optional[str] = None
) -> FundDocument:
    """다른 펀드나 다른 종류의 문서는 없는 문서와 똑같이 404로 처리한다."""
    row = get_document(db, document_id)
    if row.fund_id != fund_id or (doc_type is not None and row.type != doc_type):
        raise HTTPException(status_code=404, detail="문서를 찾을 수 없습니다.")
    return row


def list_versions(db: Session, fund_id: int, doc_type: str) -> List[FundDocument]:
    return (
        db.query(FundDocument)
        .filter(FundDocument.fund_id == fund_id, FundDocument.type == doc_type)
        .order_by(FundDocument.version_number.desc())
        .all()
    )


def list_fund_documents(db: Session, fund_id: int) -> List[FundDocument]:
    return (
        db.query(FundDocument)
        .filter(FundDocument.fund_id == fund_id)
        .order_by(FundDocument.generated_at.desc(), FundDocument.document_id.desc())
        .all()
    )


def get_active_document(db: Session, fund_id: int, doc_type: str) -> Optional[FundDocument]:
    return (
        db.query(FundDocument)
        .filter(FundDocument.fund_id == fund_id, FundDocument.type == doc_type)
        .order_by(FundDocument.version_number.desc())
        .first()
    )


def _max_version(db: Session, fund_id: int, doc_type: str) -> int:
    current_max = (
        db.query(func.max(FundDocument.version_number))
        .filter(FundDocument.fund_id == fund_id, FundDocument.type == doc_type)
        .scalar()
    )
    return current_max or 0


def reserve_and_save(
    db: Session,
    *,
    fund_id: int,
    doc_type: str,
    template_id: Optional[int],
    template_version: str,
    processed_content: Dict[str, Any],
    generation_context: Dict[str, Any],
    generated_by: Optional[int],
) -> FundDocument:
    """다음 버전 번호를 예약하고 새 스냅샷을 한 트랜잭션으로 저장한다.

    (fund_id, type, version_number) 유니크 제약이 동시 요청의 번호 충돌을 막고,
    충돌하면 번호를 다시 계산해 ``VERSION_RESERVE_RETRIES`` 회까지 재시도한다.
    """
    for attempt in range(1, settings.VERSION_RESERVE_RETRIES + 1):
        version_number = _max_version(db, fund_id, doc_type) + 1
        try:
            (
                db.query(FundDocument)
                .filter(
                    FundDocument.fund_id == fund_id,
                    FundDocument.type == doc_type,
                    FundDocument.is_active == True,
                )
                .update({FundDocument.is_active: False}, synchronize_session=False)
            )
            row = FundDocument(
                fund_id=fund_id,
                type=doc_type,
                version_number=version_number,
                is_active=True,
                template_id=template_id,
                template_version=template_version,
                processed_content=dump_json(processed_content),
                generation_context=dump_json(generation_context),
                generated_by=generated_by,
            )
            db.add(row)
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                "[documents] version %s conflict fund_id=%s type=%s (attempt %s)",
                version_number, fund_id, doc_type, attempt,
            )
            continue
        db.refresh(row)
        logger.info("[documents] saved fund_id=%s type=%s version=%s", fund_id, doc_type, version_number)
        return row
    raise HTTPException(status_code=409, detail="문서 버전 번호를 예약하지 못했습니다. 다시 시도해 주세요.")


def delete_document(db: Session, fund_id: int, document_id: int, doc_type: Optional[str] = None) -> None:
    row = get_fund_document(db, fund_id, document_id, doc_type)
    if row.version_number >= _max_version(db, fund_id, row.type):
        raise HTTPException(status_code=409, detail="최신 버전은 삭제할 수 없습니다.")
    db.delete(row)
    db.commit()
    logger.info("[documents] deleted fund_id=%s type=%s version=%s", fund_id, row.type, row.version_number)


def is_document_duplicate(
    db: Session,
    fund_id: int,
    doc_type: str,
    generation_context: Dict[str, Any],
    template_version: str,
) -> bool:
    """최신 문서와 템플릿 버전, 생성 컨텍스트(생성 시각 제외)가 모두 같으면 중복이다."""
    latest = get_active_document(db, fund_id, doc_type)
    if not latest:
        return False
    if latest.template_version != template_version:
        return False
    old_context = sanitize_for_comparison(load_json(latest.generation_context, {}))
    new_context = sanitize_for_comparison(generation_context)
    return canonical_json(old_context) == canonical_json(new_context)


def snapshot_dict(row: FundDocument) -> Dict[str, Any]:
    return {
        "document_id": row.document_id,
        "fund_id": row.fund_id,
        "type": row.type,
        "version_number": row.version_number,
        "is_active": bool(row.is_active),
        "template_id": row.template_id,
        "template_version": row.template_version,
        "processed_content": load_json(row.processed_content, {}),
        "generation_context": load_json(row.generation_context, {}),
        "generated_by": row.generated_by,
        "generated_at": row.generated_at,
    }


def compare_document_versions(
    db: Session, fund_id: int, from_id: int, to_id: int, doc_type: Optional[str] = None
) -> DocumentDiff:
    if from_id == to_id:
        raise HTTPException(status_code=400, detail="동일한 문서는 비교할 수 없습니다.")
    from_row = get_fund_document(db, fund_id, from_id, doc_type)
    to_row = get_fund_document(db, fund_id, to_id, doc_type)
    if from_row.type != to_row.type:
        raise HTTPException(status_code=400, detail="다른 종류의 문서는 비교할 수 없습니다.")
    return compare_snapshots(snapshot_dict(from_row), snapshot_dict(to_row))


# --- Generation pipeline ------------------------------------------------

def resolve_template(db: Session, fund_id: int, doc_type: str) -> Tuple[Dict[str, Any], Any, Optional[int], str]:
    """(본문, 별지, template_id, template_version). 펀드별 → 글로벌 → 번들 기본 템플릿 순."""
    row = template_service.get_active_template(db, doc_type, fund_id)
    if row:
        logger.info("[documents] template loaded: %s v%s", "fund" if row.fund_id else "global", row.version)
        return load_json(row.content, {}), load_json(row.appendix), row.template_id, row.version

    default = template_service.load_default_template(doc_type)
    if default:
        version = default.get("version") or settings.DEFAULT_TEMPLATE_VERSION
        logger.info("[documents] template loaded: bundled file v%s", version)
        return default.get("content") or {}, default.get("appendix"), None, version

    raise HTTPException(status_code=404, detail="템플릿을 찾을 수 없습니다.")


def render(template_content: Any, context: Dict[str, Any], appendix: Any = None) -> Dict[str, Any]:
    try:
        return process_template(template_content, context, appendix)
    except ValueError as exc:
        logger.warning("[documents] template rendering failed: %s", exc)
        raise HTTPException(status_code=422, detail=f"템플릿을 처리할 수 없습니다: {exc}")


def preview(db: Session, fund_id: int, doc_type: str, user: User) -> Dict[str, Any]:
    context = build_document_context(db, fund_id, user, is_preview=True)
    content, appendix, template_id, template_version = resolve_template(db, fund_id, doc_type)
    return {
        "type": doc_type,
        "template_id": template_id,
        "template_version": template_version,
        "processed_content": render(content, context, appendix),
    }


def check_duplicate(db: Session, fund_id: int, doc_type: str, user: User) -> bool:
    context = build_document_context(db, fund_id, user)
    _, _, _, template_version = resolve_template(db, fund_id, doc_type)
    return is_document_duplicate(db, fund_id, doc_type, context, template_version)


def _diff_with_previous(previous: Optional[FundDocument], current: FundDocument) -> Tuple[Optional[DocumentDiff], Optional[str]]:
    if previous is None:
        return None, None
    try:
        return compare_snapshots(snapshot_dict(previous), snapshot_dict(current)), None
    except Exception as exc:
        logger.warning(
            "[documents] diff against v%s failed fund_id=%s type=%s: %s",
            previous.version_number, current.fund_id, current.type, exc,
        )
        return None, DIFF_UNAVAILABLE


def generate(
    db: Session,
    fund_id: int,
    doc_type: str,
    user: User,
    *,
    modified_content: Optional[Dict[str, Any]] = None,
    modified_appendix: Any = None,
    change_description: Optional[str] = None,
) -> Dict[str, Any]:
    """새 문서 버전을 생성한다. 비교 실패는 저장을 막지 않는다."""
    ensure_document_type(doc_type)
    get_fund_or_404(db, fund_id)
    context = build_document_context(db, fund_id, user)
    previous = get_active_document(db, fund_id, doc_type)
    template_changes: List[TemplateChange] = []

    if modified_content is not None:
        if previous is not None:
            base_content = load_json(previous.processed_content, {})
            base_version = previous.template_version
        else:
            base_content, _, _, base_version = resolve_template(db, fund_id, doc_type)
        template_changes = analyze_template_changes(base_content, modified_content)
        template_content, appendix, template_id = modified_content, modified_appendix, None
        template_version = calculate_next_version(base_version, template_changes)
        context["changeDescription"] = change_description or generate_change_description(template_changes)
    else:
        template_content, appendix, template_id, template_version = resolve_template(db, fund_id, doc_type)
        if is_document_duplicate(db, fund_id, doc_type, context, template_version):
            raise HTTPException(
                status_code=409,
                detail={
                    "message": "이미 동일한 내용의 문서가 최신 버전으로 존재합니다. 펀드 정보를 변경하거나 내용을 수정한 후 다시 시도해주세요.",
                    "code": "DUPLICATE_DOCUMENT",
                },
            )

    processed_content = render(template_content, context, appendix)
    row = reserve_and_save(
        db,
        fund_id=fund_id,
        doc_type=doc_type,
        template_id=template_id,
        template_version=template_version,
        processed_content=processed_content,
        generation_context=context,
        generated_by=user.user_id,
    )
    document_diff, diff_error = _diff_with_previous(previous, row)
    return {
        "document": snapshot_dict(row),
        "diff": document_diff,
        "diff_error": diff_error,
        "template_changes": template_changes,
    }
