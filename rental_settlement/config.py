"""Configuration management using Pydantic Settings"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "rental-settlement"
    log_level: str = "INFO"

    # Settlement pricing
    fuel_price_per_quarter: Decimal = Decimal("50")
    excess_km_price: Decimal = Decimal("0.5")

    # Fiscal invoice
    vat_rate: Decimal = Decimal("0.15")

    # Arrears
    arrears_threshold: Decimal = Decimal("1500")
    overdue_grace_days: int = 14  # Payment terms before a contract counts as overdue
    critical_arrears_amount: Decimal = Decimal("5000")


settings = Settings()
