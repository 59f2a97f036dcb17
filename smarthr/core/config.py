# smarthr/core/config.py
import os
import re
from datetime import timedelta
from typing import Dict, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str) -> timedelta:
    """Parse values such as '24h', '7d', '30m' or '3600' into a timedelta"""
    match = _DURATION_RE.match(str(value).lower())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # === Database ===
    DATABASE_URL: Optional[str] = None
    DB_DRIVER: str = "postgresql+asyncpg"
    DB_SERVER: str = "localhost"
    DB_DATABASE: str = "smarthr"
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_PORT: Optional[int] = None
    DB_ENCRYPT: bool = False
    DB_TRUST_SERVER_CERTIFICATE: bool = False
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 30
    DB_POOL_TIMEOUT: int = 60
    DB_POOL_RECYCLE: int = 3600
    DB_ECHO: bool = False

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure database URL is safe for current environment"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if v and env == "production" and "localhost" in v:
            raise ValueError("Production environment cannot use localhost database!")
        return v

    # === JWT ===
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: str = "24h"
    JWT_REFRESH_EXPIRES_IN: str = "7d"
    JWT_ISSUER: str = "SmartHR-System"

    @field_validator("JWT_EXPIRES_IN", "JWT_REFRESH_EXPIRES_IN")
    @classmethod
    def validate_duration(cls, v):
        parse_duration(v)
        return v

    # === Security ===
    BCRYPT_SALT_ROUNDS: int = 10
    LOGIN_MAX_FAILED_ATTEMPTS: int = 5

    # === CORS ===
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    ALLOWED_METHODS: List[str] = ["*"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # === System ===
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    LOG_DIR: str = "logs"

    # === Business Rules ===
    MAX_PAGE_SIZE: int = 100
    ANNUAL_LEAVE_DAYS: float = 15
    VACATION_FORM_CODE: str = "VACATION"
    ASSIGNMENT_COMPREHENSIVE_THRESHOLD: int = 3
    # Checked in order; first rule whose fields all changed wins
    ASSIGNMENT_TYPE_RULES: Dict[str, str] = {
        "company,sub_company": "COMPANY_TRANSFER",
        "sub_company": "BRANCH_TRANSFER",
        "department,position": "DEPT_TRANSFER_PROMOTION",
        "department": "DEPT_TRANSFER",
        "position": "POSITION_CHANGE",
    }

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL

        query: Dict[str, str] = {}
        if self.DB_DRIVER.startswith("mssql"):
            query["driver"] = "ODBC Driver 18 for SQL Server"
            query["Encrypt"] = "yes" if self.DB_ENCRYPT else "no"
            query["TrustServerCertificate"] = "yes" if self.DB_TRUST_SERVER_CERTIFICATE else "no"
        elif self.DB_ENCRYPT:
            query["ssl"] = "require"

        return URL.create(
            drivername=self.DB_DRIVER,
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_SERVER,
            port=self.DB_PORT,
            database=self.DB_DATABASE,
            query=query,
        ).render_as_string(hide_password=False)

    @property
    def access_token_expires(self) -> timedelta:
        return parse_duration(self.JWT_EXPIRES_IN)

    @property
    def refresh_token_expires(self) -> timedelta:
        return parse_duration(self.JWT_REFRESH_EXPIRES_IN)


# Create a global settings instance
settings = Settings()
