from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Fee Ledger"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/fee_ledger.db"
    REDIS_URL: str = "redis://localhost:6379"

    # Invoicing
    BILLING_DUE_DAY: int = 15  # day of the billing month an invoice falls due
    INVOICE_NUMBER_MAX_RETRIES: int = 5

    # Scheduled billing cycle (0 disables the monthly cron)
    BILLING_CYCLE_AMOUNT: Decimal = Decimal("0")
    BILLING_CYCLE_DESCRIPTION: str = "Tuition"

    # Batch jobs are cancelled once they run longer than this
    BATCH_TIMEOUT_SECONDS: float = 600.0

    # Student directory
    STUDENT_DIRECTORY_URL: str = ""
    STUDENT_DIRECTORY_API_KEY: str = ""

    # Notifications
    NOTIFICATION_WEBHOOK_URL: str = ""
    webhook_secret: str = "whsec_default_secret"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"


settings = Settings()
