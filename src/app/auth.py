"""
인증 단계: 요청마다 타입이 있는 Identity를 request.state에 바인딩.

RequestContext.is_admin()/current_user()는 여기서 바인딩한 값만 읽는다.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.database import get_session
from src.domain.models import User

logger = logging.getLogger(__name__)

IDENTITY_STATE_KEY = "identity"


@dataclass(frozen=True)
class Identity:
    """요청 주체. 익명 요청은 user=None, is_admin=False."""
    user: User | None = None
    is_admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


ANONYMOUS = Identity()


def bind_identity(request: Request, identity: Identity) -> None:
    setattr(request.state, IDENTITY_STATE_KEY, identity)


def get_identity(request: Request) -> Identity | None:
    """바인딩된 Identity (인증 단계가 실행되지 않았으면 None)."""
    identity = getattr(request.state, IDENTITY_STATE_KEY, None)
    return identity if isinstance(identity, Identity) else None


def authenticate(request: Request, session: Session = Depends(get_session)) -> Identity:
    """
    세션 쿠키로 사용자 조회 후 Identity 바인딩 (FastAPI 의존성).

    쿠키가 없거나 일치하는 사용자가 없으면 익명.
    """
    cookie_name = request.app.state.settings.session_cookie
    token = request.cookies.get(cookie_name)

    identity = ANONYMOUS
    if token:
        user = session.scalars(select(User).where(User.session_token == token)).first()
        if user is not None:
            identity = Identity(user=user, is_admin=user.is_admin)
        else:
            logger.info("Unknown session token, treating request as anonymous")

    bind_identity(request, identity)
    return identity
