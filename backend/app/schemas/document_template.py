"""DocumentTemplate 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Any, Dict, Optional
from datetime import datetime


class TemplateCreate(BaseModel):
    version: str
    content: Dict[str, Any]
    appendix: Optional[Any] = None
    description: Optional[str] = None
    is_active: bool = False
    fund_id: Optional[int] = None


class TemplateVersionCreate(BaseModel):
    content: Dict[str, Any]
    appendix: Optional[Any] = None
    description: Optional[str] = None
    version: Optional[str] = None
    fund_id: Optional[int] = None
    activate: bool = True


class TemplateUpdate(BaseModel):
    content: Optional[Dict[str, Any]] = None
    description: Optional[str] = None


class TemplateAnalyzeRequest(BaseModel):
    content: Dict[str, Any]
    fund_id: Optional[int] = None


class TemplateOut(BaseModel):
    template_id: int
    type: str
    version: str
    content: Dict[str, Any]
    appendix: Optional[Any] = None
    description: Optional[str] = None
    is_active: bool
    fund_id: Optional[int] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
