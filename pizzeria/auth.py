"""Tokens issued by the external identity provider.

The provider signs HS256 tokens with a shared secret; this service only
decodes them and mirrors the identity claims into the local users table.
``create_access_token`` exists for development and tests.
"""
import os
import time
from typing import Optional

import jwt

from . import schemas

SECRET = os.getenv("AUTH_SECRET", "dev-secret")
ALGORITHM = os.getenv("AUTH_ALGORITHM", "HS256")
EXP_SECONDS = 60 * 60 * 24  # 1 day
SESSION_COOKIE = os.getenv("SESSION_COOKIE_NAME", "session")

IDENTITY_CLAIMS = ("email", "first_name", "last_name", "profile_image_url")


def create_access_token(user_id: str, claims: Optional[dict] = None, expires_delta: Optional[int] = None) -> str:
    now = int(time.time())
    exp = now + (expires_delta or EXP_SECONDS)
    payload = dict(claims or {})
    payload.update({"sub": str(user_id), "iat": now, "exp": exp})
    return jwt.encode(payload, SECRET, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    # raises jwt.PyJWTError on a bad signature or expiry
    return jwt.decode(token, SECRET, algorithms=[ALGORITHM])


def claims_to_user(claims: dict) -> schemas.UserUpsert:
    """Map identity claims to an upsert payload. Never grants admin."""
    fields = {name: claims.get(name) for name in IDENTITY_CLAIMS}
    return schemas.UserUpsert(id=str(claims["sub"]), **fields)
