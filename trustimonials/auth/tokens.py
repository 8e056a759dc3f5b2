from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import HTTPException, status
from jose import jwt
from jose.exceptions import JWTError

from trustimonials.config import settings

logger = logging.getLogger("auth.tokens")


def verify_access_token(token: str) -> Dict[str, Any]:
    options = {"verify_aud": bool(settings.AUTH_JWT_AUDIENCE)}
    try:
        claims = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            options=options,
        )
    except (JWTError, ValueError) as exc:
        logger.warning("Token verification failed", exc_info=exc)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    logger.debug("Verified access token", extra={"sub": claims.get("sub"), "role": claims.get("role")})
    return claims


def create_access_token(claims: Dict[str, Any]) -> str:
    """Sign claims with the service secret; used by seed scripts and tests."""
    payload = dict(claims)
    if settings.AUTH_JWT_AUDIENCE and "aud" not in payload:
        payload["aud"] = settings.AUTH_JWT_AUDIENCE
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)
