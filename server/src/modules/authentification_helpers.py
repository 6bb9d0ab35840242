import datetime
from functools import lru_cache
from typing import Any, Optional

from fastapi import Depends, Request, Response
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pymongo.errors import DuplicateKeyError

from db_mongo import USERS_COL, get_col
from server.src.modules.auth_config import AuthSettings, get_auth_settings
from server.src.modules.errors import (
    DuplicateUser,
    InvalidCredentials,
    TokenExpired,
    TokenInvalid,
    TokenMissing,
)
from server.src.modules.logging_helpers import logger

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    # passlib raises on hashes it cannot identify
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        return False


def find_user(username: str) -> Optional[dict]:
    return get_col(USERS_COL).find_one({"username": username})


class CredentialService:
    """Password verification plus issuing and checking signed session tokens.

    The service holds no per-request state. It is built once from an
    ``AuthSettings`` value; token checks never touch the database.
    """

    def __init__(self, config: AuthSettings):
        self.config = config

    def register(self, username: str, password: str) -> str:
        users = get_col(USERS_COL)
        if users.find_one({"username": username}, {"_id": 1}):
            raise DuplicateUser()
        doc = {
            "username": username,
            "password_hash": hash_password(password),
            "created_at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        }
        try:
            res = users.insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateUser() from None
        logger.info("Registered user=%s", username)
        return str(res.inserted_id)

    def verify_credentials(self, username: str, password: str) -> str:
        user = find_user(username)
        if user is None:
            # keep the unknown-user path as slow as a real hash check
            pwd_context.dummy_verify()
            logger.info("Login failed for user=%s", username)
            raise InvalidCredentials()
        if not verify_password(password, user.get("password_hash") or ""):
            logger.info("Login failed for user=%s", username)
            raise InvalidCredentials()
        return str(user["_id"])

    def issue_token(self, user_id: str, username: str) -> str:
        now = datetime.datetime.now(datetime.timezone.utc)
        claims = {
            "sub": str(user_id),
            "username": username,
            "iat": now,
            "exp": now + self.config.token_ttl,
        }
        return jwt.encode(claims, self.config.secret_key, algorithm=self.config.algorithm)

    def verify_token(self, token: Optional[str]) -> dict[str, Any]:
        if not token or not token.strip():
            raise TokenMissing()
        try:
            claims = jwt.decode(token, self.config.secret_key, algorithms=[self.config.algorithm])
        except ExpiredSignatureError:
            raise TokenExpired() from None
        except JWTError:
            raise TokenInvalid() from None
        if not claims.get("sub") or not claims.get("username"):
            raise TokenInvalid()
        return claims

    def set_session_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.config.cookie_name,
            value=token,
            max_age=int(self.config.token_ttl.total_seconds()),
            httponly=True,
            samesite="strict",
            secure=self.config.cookie_secure,
        )

    def clear_session_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.config.cookie_name,
            httponly=True,
            samesite="strict",
            secure=self.config.cookie_secure,
        )


@lru_cache
def get_credential_service() -> CredentialService:
    return CredentialService(get_auth_settings())


def get_session_token(request: Request, credentials: CredentialService) -> Optional[str]:
    return request.cookies.get(credentials.config.cookie_name)


def require_auth(
    request: Request,
    credentials: CredentialService = Depends(get_credential_service),
) -> dict[str, Any]:
    """Return the session claims or raise an ``AuthError``."""
    return credentials.verify_token(get_session_token(request, credentials))
