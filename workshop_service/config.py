from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./workshops.db"
    SECRET_KEY: str = "dev-secret-workshops"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    LOG_LEVEL: str = "INFO"

    RATE_LIMIT_PER_MINUTE: int = 60
    LOGIN_RATE_LIMIT_PER_MINUTE: int = 10
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # Empty SMTP_HOST: messages are only logged, nothing is delivered
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: float = 10.0
    MAIL_FROM: str = "no-reply@workshops.local"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
