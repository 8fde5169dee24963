from pydantic_settings import BaseSettings
from decimal import Decimal


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./billing.db"
    database_echo: bool = False

    # Invoice numbering: prefix + zero-padded sequence, e.g. INV-000042
    invoice_number_prefix: str = "INV-"
    invoice_number_width: int = 6
    invoice_number_max_retries: int = 3  # Attempts before surfacing a ConflictError

    # Defaults applied when an invoice is created without explicit rates
    default_tax_rate: Decimal = Decimal("11")
    default_discount_rate: Decimal = Decimal("0")

    # CORS Configuration
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file


settings = Settings()
