"""펀드별로 생성된 문서의 불변 버전 스냅샷 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class FundDocument(Base):
    __tablename__ = "fund_documents"

    document_id = Column(Integer, primary_key=True, autoincrement=True)
    fund_id = Column(Integer, ForeignKey("funds.fund_id"), nullable=False)
    type = Column(String(50), nullable=False)
    version_number = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True)  # 최신 버전 여부
    template_id = Column(Integer, ForeignKey("document_templates.template_id"), nullable=True)
    template_version = Column(String(20), nullable=False)
    processed_content = Column(Text, nullable=False)  # JSON string
    generation_context = Column(Text)  # JSON string
    generated_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    generated_at = Column(DateTime, server_default=func.now())

    fund = relationship("Fund", back_populates="documents")
    generator = relationship("User", back_populates="generated_documents")

    __table_args__ = (
        UniqueConstraint("fund_id", "type", "version_number", name="uq_fund_document_version"),
        Index("idx_fund_document_type", "fund_id", "type", "is_active"),
    )
