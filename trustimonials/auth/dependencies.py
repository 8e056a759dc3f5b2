from dataclasses import dataclass
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from trustimonials.auth.tokens import verify_access_token
from trustimonials.db.deps import get_session
from trustimonials.db.enums import UserRoleEnum
from trustimonials.db.repositories.users import UsersRepository


bearer_scheme = HTTPBearer(auto_error=False)
logger = logging.getLogger("auth.deps")


@dataclass
class AuthContext:
    user_id: str
    role: UserRoleEnum = UserRoleEnum.user
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRoleEnum.admin


def _parse_role(value) -> UserRoleEnum:
    try:
        return UserRoleEnum(value)
    except ValueError:
        return UserRoleEnum.user


def _context_from_token(token: str, session: Session) -> AuthContext:
    claims = verify_access_token(token)
    subject = claims.get("sub")
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token claims")

    role = _parse_role(claims.get("role") or UserRoleEnum.user.value)
    user = UsersRepository(session).upsert_from_claims(
        external_id=str(subject),
        email=claims.get("email"),
        name=claims.get("name"),
        role=role,
    )
    logger.debug("AuthContext built", extra={"sub": subject, "user_id": str(user.id), "role": role.value})
    return AuthContext(user_id=str(user.id), role=user.role, email=user.email, name=user.name)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> AuthContext:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return _context_from_token(credentials.credentials, session)


def get_optional_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Optional[AuthContext]:
    if credentials is None or not credentials.credentials:
        return None
    return _context_from_token(credentials.credentials, session)


def require_admin(auth: AuthContext = Depends(get_current_user)) -> AuthContext:
    if not auth.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return auth
