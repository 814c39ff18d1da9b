"""문서 템플릿 버전 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.sql import func

from app.database import Base


class DocumentTemplate(Base):
    __tablename__ = "document_templates"

    template_id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(50), nullable=False)  # lpa/member_list/lpa_consent_form/...
    version = Column(String(20), nullable=False)  # major.minor.patch
    content = Column(Text, nullable=False)  # JSON string: {type, sections}
    appendix = Column(Text)  # JSON string
    description = Column(Text)
    is_active = Column(Boolean, default=False)
    fund_id = Column(Integer, ForeignKey("funds.fund_id"), nullable=True)  # NULL이면 글로벌 템플릿
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    __table_args__ = (
        Index("idx_document_template_type", "type", "fund_id", "is_active"),
    )
