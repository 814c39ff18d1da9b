"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from app.models.user import User
from app.models.fund import Fund, FundMember
from app.models.document_template import DocumentTemplate
from app.models.fund_document import FundDocument

__all__ = [
    "User",
    "Fund", "FundMember",
    "DocumentTemplate",
    "FundDocument",
]
