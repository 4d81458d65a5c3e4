from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from shared.core import set_request_context
from relief_inventory.application.actor import Actor
from relief_inventory.application.service import CoordinationService
from relief_inventory.core_settings import get_settings
from relief_inventory.infrastructure.db import get_db

BEARER_PREFIX = "Bearer "

def create_access_token(subject: str, roles: Iterable[str] = (), expires_minutes: int = 60) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "roles": list(roles),
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def decode_access_token(token: str) -> Optional[dict]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except jwt.PyJWTError:
        return None

def get_current_actor(request: Request) -> Actor:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Missing token")
    token = auth_header.split(" ", 1)[1]
    token_data = decode_access_token(token)
    if not token_data or not token_data.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    actor = Actor(user_id=str(token_data["sub"]), roles=tuple(token_data.get("roles") or ()))
    set_request_context(user_id=actor.user_id)
    return actor

def get_service(db: Session = Depends(get_db)) -> CoordinationService:
    return CoordinationService(db)
