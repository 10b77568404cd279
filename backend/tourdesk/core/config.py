"""
Application Configuration
"""
from pydantic_settings import BaseSettings
from typing import List, Optional
import warnings

WEAK_SECRET_KEYS = {
    "your-super-secret-key-change-in-production-min-32-chars",
    "dev-secret-key-change-in-production",
    "secret-key",
    "change-me",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Tour Desk API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./tourdesk.db"

    # Security
    SECRET_KEY: str = "your-super-secret-key-change-in-production-min-32-chars"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # First admin, created on startup when no user exists
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: Optional[str] = None

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Voucher / document header
    COMPANY_NAME: str = "Tour Desk Travels"
    COMPANY_ADDRESS: str = ""
    COMPANY_PHONE: str = ""
    COMPANY_EMAIL: str = ""
    CURRENCY_SYMBOL: str = "₹"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def database_url(self) -> str:
        """DATABASE_URL with `file:` paths turned into SQLite URLs"""
        if self.DATABASE_URL.startswith("file:"):
            return f"sqlite:///{self.DATABASE_URL[len('file:'):]}"
        return self.DATABASE_URL

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def security_problems(self) -> List[str]:
        problems = []
        if self.SECRET_KEY in WEAK_SECRET_KEYS:
            problems.append("SECRET_KEY is a placeholder value; set a random SECRET_KEY")
        if len(self.SECRET_KEY) < 32:
            problems.append("SECRET_KEY should be at least 32 characters")
        if self.is_production and self.DEBUG:
            problems.append("DEBUG must be off in production")
        return problems

    def validate_security_settings(self):
        """Raise in production, warn elsewhere, when the security settings are unsafe"""
        problems = self.security_problems()
        if problems and self.is_production:
            raise ValueError("Insecure production settings: " + "; ".join(problems))
        for problem in problems:
            warnings.warn(problem, UserWarning)
        return not problems

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
settings.validate_security_settings()
