"""이메일 모의 로그인과 현재 세션 조회 API입니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user
from app.models.user import User
from app.schemas.user import LoginRequest, SessionOut, TokenResponse
from app.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.issue_session(db, request.email)


@router.get("/me", response_model=SessionOut)
def me(current_user: User = Depends(get_current_user)):
    return auth_service.describe_session(current_user)
