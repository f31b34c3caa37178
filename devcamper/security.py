"""
DevCamper API — Credentials & Tokens
=====================================

What:  Password hashing, JWT signing/verification, and password-reset tokens.

Passwords:
    argon2id via argon2-cffi. Hashing is CPU bound, so the async wrappers run
    it in the threadpool to keep the event loop responsive.

Access tokens:
    HS256 JWT with claims {"id": <user uuid>, "exp": <expiry>} signed with
    JWT_SECRET. Any decoding failure (bad signature, expired, malformed)
    collapses into UnauthorizedError.

Reset tokens:
    20 random bytes as hex are mailed to the user; only their sha256 digest is
    stored, so a leaked database row cannot be replayed.
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Tuple

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from fastapi.concurrency import run_in_threadpool

from devcamper.config import Settings
from devcamper.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except VerificationError:
        return False
    except InvalidHashError:
        logger.error("Stored password hash is not a valid argon2 hash")
        return False


async def hash_password_async(password: str) -> str:
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await run_in_threadpool(verify_password, password, password_hash)


def create_access_token(user_id: object, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=settings.jwt_expire_days)
    payload = {"id": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> str:
    """Returns the user id carried by `token`; raises UnauthorizedError otherwise."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.debug("Rejected access token: %s", e)
        raise UnauthorizedError(context={"reason": type(e).__name__})
    user_id = payload.get("id")
    if not user_id:
        raise UnauthorizedError(context={"reason": "missing id claim"})
    return str(user_id)


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_reset_token(settings: Settings) -> Tuple[str, str, datetime]:
    """
    Returns (raw token for the email, digest to store, expiry).
    """
    raw = secrets.token_hex(20)
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.reset_token_expire_minutes)
    return raw, hash_reset_token(raw), expire
