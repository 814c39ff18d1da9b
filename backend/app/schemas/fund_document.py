"""FundDocument 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.schemas.diff import DocumentDiff, TemplateChange


class GenerateRequest(BaseModel):
    modified_content: Optional[Dict[str, Any]] = None
    modified_appendix: Optional[Any] = None
    change_description: Optional[str] = None


class FundDocumentOut(BaseModel):
    document_id: int
    fund_id: int
    type: str
    version_number: int
    is_active: bool
    template_id: Optional[int] = None
    template_version: str
    processed_content: Dict[str, Any]
    generation_context: Dict[str, Any]
    generated_by: Optional[int] = None
    generated_at: Optional[datetime] = None


class GenerateResult(BaseModel):
    document: FundDocumentOut
    diff: Optional[DocumentDiff] = None
    diff_error: Optional[str] = None
    template_changes: List[TemplateChange] = []


class PreviewOut(BaseModel):
    type: str
    template_id: Optional[int] = None
    template_version: str
    processed_content: Dict[str, Any]


class DuplicateCheckOut(BaseModel):
    is_duplicate: bool
