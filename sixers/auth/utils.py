"""
Authentication utilities - JWT claim handling and identity dependency
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from sixers.config import settings
from sixers.errors import ForbiddenError


# Security scheme for Bearer token
security = HTTPBearer()


@dataclass
class Identity:
    """Who is calling: the token subject and, for scorers, their tournament"""
    user_id: str
    tournament_id: Optional[int] = None


def create_access_token(user_id: str, tournament_id: Optional[int] = None) -> str:
    """Create a JWT access token. Used by the CLI and tests; production tokens come from upstream."""
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "exp": expire,
    }
    if tournament_id is not None:
        payload[settings.TOURNAMENT_CLAIM] = str(tournament_id)
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[Identity]:
    """Decode a JWT and return the identity if valid"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None

    tournament_id = payload.get(settings.TOURNAMENT_CLAIM)
    try:
        tournament_id = int(tournament_id) if tournament_id is not None else None
    except (TypeError, ValueError):
        return None

    return Identity(user_id=str(user_id), tournament_id=tournament_id)


def get_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Identity:
    """
    FastAPI dependency to get the caller's identity.
    Use this in route functions: identity: Identity = Depends(get_identity)
    """
    identity = decode_token(credentials.credentials)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def require_tournament(identity: Identity = Depends(get_identity)) -> Identity:
    """Scoring routes only: the token must carry a tournament claim"""
    if identity.tournament_id is None:
        raise ForbiddenError("Token carries no tournament claim")
    return identity
