from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from settings import DEFAULT_JWT_SECRET, settings


@dataclass(frozen=True)
class AuthSettings:
    secret_key: str
    algorithm: str
    token_ttl: timedelta
    cookie_name: str
    cookie_secure: bool

    @property
    def uses_default_secret(self) -> bool:
        return self.secret_key == DEFAULT_JWT_SECRET


@lru_cache
def get_auth_settings() -> AuthSettings:
    return AuthSettings(
        secret_key=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        token_ttl=timedelta(hours=max(1, settings.token_ttl_hours)),
        cookie_name=settings.cookie_name,
        cookie_secure=settings.cookie_secure,
    )
