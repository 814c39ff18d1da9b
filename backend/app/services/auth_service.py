"""Auth Service 도메인 서비스 레이어입니다. 이메일 기반 모의 로그인과 토큰 발급을 담당합니다."""

import logging
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from jose import jwt
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import User
from app.schemas.user import SessionOut, TokenResponse, UserOut

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ADMIN_ROLE = "admin"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_access_token(user_id: int) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def mock_login(db: Session, email: str) -> User:
    user = db.query(User).filter(User.email == normalize_email(email), User.is_active == True).first()
    if not user:
        logger.info("[auth] login rejected email=%s", normalize_email(email))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"이메일 '{email}'에 해당하는 활성 사용자를 찾을 수 없습니다.",
        )
    return user


def issue_session(db: Session, email: str) -> TokenResponse:
    """활성 사용자를 찾아 액세스 토큰과 만료(초)를 함께 돌려준다."""
    user = mock_login(db, email)
    logger.info("[auth] login user_id=%s role=%s", user.user_id, user.role)
    return TokenResponse(
        access_token=create_access_token(user.user_id),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserOut.model_validate(user),
    )


def describe_session(user: User) -> SessionOut:
    return SessionOut(user=UserOut.model_validate(user), is_admin=user.role == ADMIN_ROLE)
