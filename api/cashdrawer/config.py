from decimal import Decimal

from pydantic_settings import BaseSettings
from pydantic import Field, AnyUrl

class Settings(BaseSettings):
    app_name: str = "Cash Drawer API"
    app_env: str = Field("development", alias="APP_ENV")
    app_url: AnyUrl | str = Field("http://localhost:3000", alias="APP_URL")
    api_url: AnyUrl | str = Field("http://localhost:8000", alias="API_URL")

    database_url: str = Field(..., alias="DATABASE_URL")

    # Declared and calculated totals closer than this are balanced
    balance_tolerance: Decimal = Field(Decimal("0.01"), alias="BALANCE_TOLERANCE", gt=0)
    currency: str = Field("PKR", alias="CURRENCY")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(True, alias="LOG_JSON")

    sentry_dsn: str | None = Field(None, alias="SENTRY_DSN")

    class Config:
        env_file = ".env"
        case_sensitive = False
