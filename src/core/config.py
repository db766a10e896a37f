from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional, List


class Settings(BaseSettings):
    PROJECT_NAME: str = Field("Webinar Backend API")
    VERSION: str = Field("1.0.0")
    API_V1_STR: str = Field("/api/v1")

    MONGODB_URI: str = Field(...)
    MONGODB_DB: str = Field("webinar")

    JWT_SECRET: str = Field(...)
    JWT_ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24)
    # when set, POST /admin/create requires it as bearer token
    ADMIN_CREATION_TOKEN: Optional[str] = Field(default=None)

    SENDGRID_API_KEY: Optional[str] = Field(default=None)
    SENDGRID_API_URL: str = Field("https://api.sendgrid.com/v3/mail/send")
    EMAIL_FROM: str = Field("no-reply@webinar.local")
    EMAIL_TIMEOUT: int = Field(10)
    WEBINAR_TITLE: str = Field("Webinar")
    WEBINAR_LINK: str = Field("https://zoom.us/xyz")
    WEBINAR_DATE: Optional[str] = Field(default=None)

    CORS_ORIGINS: List[str] = Field(default=["*"])
    MAX_PAGE_SIZE: int = Field(100)
    LOG_LEVEL: str = Field("INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
