from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_COUNT_ONLY_PRODUCT_TYPES = (
    "LOAN_DETAILS,FOREX_CARD,TUTION_FEES,CREDIT_CARD,"
    "SIM_CARD_ACTIVATION,INSURANCE,BEACON_ACCOUNT,AIR_TICKET"
)


class Settings(BaseSettings):
    # Ignore unrelated env keys so local/dev .env can include optional integrations.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Counsellor CRM Backend"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_anon_key: Optional[str] = Field(default=None, alias="SUPABASE_ANON_KEY")

    business_timezone: str = Field(default="UTC", alias="BUSINESS_TIMEZONE")
    core_product_type: str = Field(default="ALL_FINANCE_EMPLOYEMENT", alias="CORE_PRODUCT_TYPE")
    count_only_product_types: str = Field(
        default=DEFAULT_COUNT_ONLY_PRODUCT_TYPES, alias="COUNT_ONLY_PRODUCT_TYPES"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
