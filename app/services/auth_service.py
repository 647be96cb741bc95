from typing import Optional
from uuid import uuid4
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from loguru import logger
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session, select
from app.core.config import settings
from app.core.errors import ValidationError
from app.db.session import get_session
from app.models.base import ensure_utc
from app.models.user import User
from app.models.refresh_token import RefreshToken
from app.schemas.auth import RegisterRequest, TokenResponse
from app.services.authorization import ensure_admin, ensure_moderator

pwd_context = CryptContext(schemes=['bcrypt'], deprecated='auto')
security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return pwd_context.verify(password, hashed_password)


def _encode(subject: str, token_type: str, expires_at: datetime) -> str:
    payload = {
        'sub': subject,
        'type': token_type,
        'iat': datetime.now(timezone.utc),
        'exp': expires_at,
        'jti': uuid4().hex,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _decode(token: str, token_type: str) -> str:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise _unauthorized('Invalid token') from exc
    if payload.get('type') != token_type:
        raise _unauthorized('Invalid token type')
    return payload.get('sub')


def is_ban_active(user: User, now: Optional[datetime] = None) -> bool:
    if not user.is_banned:
        return False
    if user.banned_until is None:
        return True
    return ensure_utc(user.banned_until) > (now or datetime.now(timezone.utc))


def _ensure_not_banned(user: User) -> None:
    if not is_ban_active(user):
        return
    if user.banned_until is None:
        detail = 'Account is permanently banned'
    else:
        detail = f'Account is banned until {ensure_utc(user.banned_until).isoformat()}'
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def register_user(session: Session, payload: RegisterRequest) -> User:
    if session.exec(select(User).where(User.email == payload.email)).first():
        raise ValidationError('Email already registered', code='email_taken')
    user = User(
        email=payload.email,
        hashed_password=hash_password(payload.password),
        username=payload.username,
        name=payload.name,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info('auth.registered', user_id=user.id)
    return user


def authenticate(session: Session, email: str, password: str) -> User:
    user = session.exec(select(User).where(User.email == email)).first()
    if not user:
        raise _unauthorized('Account not found')
    if not verify_password(password, user.hashed_password):
        logger.info('auth.login_failed', user_id=user.id)
        raise _unauthorized('Wrong password')
    _ensure_not_banned(user)
    return user


def issue_tokens(session: Session, user_id: str) -> TokenResponse:
    now = datetime.now(timezone.utc)
    access_token = _encode(user_id, 'access', now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    refresh_expires = now + timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)
    refresh_token = _encode(user_id, 'refresh', refresh_expires)
    session.add(RefreshToken(token=refresh_token, user_id=user_id, expires_at=refresh_expires))
    session.commit()
    return TokenResponse(access_token=access_token, refresh_token=refresh_token)


def revoke_refresh_token(session: Session, token: str) -> None:
    record = session.exec(select(RefreshToken).where(RefreshToken.token == token)).first()
    if record:
        session.delete(record)
        session.commit()


def rotate_refresh_token(session: Session, token: str) -> TokenResponse:
    """Exchange a refresh token for a new pair; the old one is single use."""
    user_id = _decode(token, 'refresh')
    record = session.exec(select(RefreshToken).where(RefreshToken.token == token)).first()
    if not record:
        raise _unauthorized('Refresh token revoked')
    expires_at = ensure_utc(record.expires_at)
    session.delete(record)
    session.commit()
    if expires_at < datetime.now(timezone.utc):
        raise _unauthorized('Refresh token expired')
    return issue_tokens(session, user_id)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: Session = Depends(get_session),
) -> User:
    user_id = _decode(credentials.credentials, 'access')
    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise _unauthorized('User not found')
    _ensure_not_banned(user)
    return user


def require_moderator(user: User = Depends(get_current_user)) -> User:
    ensure_moderator(user)
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    ensure_admin(user)
    return user
