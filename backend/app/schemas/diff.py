"""문서/템플릿 버전 비교 결과 응답 계약을 위한 Pydantic 스키마입니다."""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel

ChangeKind = Literal["added", "removed", "modified"]
BumpType = Literal["major", "minor", "patch"]


class DocumentChange(BaseModel):
    path: str
    type: ChangeKind
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    display_path: Optional[str] = None


class DiffSummary(BaseModel):
    added: int = 0
    removed: int = 0
    modified: int = 0


class DocumentDiff(BaseModel):
    from_version: Union[int, str]
    to_version: Union[int, str]
    changes: List[DocumentChange]
    summary: DiffSummary


class TemplateChange(BaseModel):
    type: BumpType
    path: str
    description: str
    depth: int
    level: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    display_path: Optional[str] = None


class TemplateUpdateAnalysis(BaseModel):
    current_version: str
    next_version: str
    description: str
    changes: List[TemplateChange]
