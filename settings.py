from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "dev_secret"


class Settings(BaseSettings):
    mongodb_uri: str = "mongodb://localhost:27017/potions"
    db_name: str = "potions"
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = 24
    cookie_name: str = "potions_session"
    cookie_secure: bool = False
    cors_origins: str = "*"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
