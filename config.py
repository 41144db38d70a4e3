from pydantic_settings import BaseSettings
from typing import Dict


class Settings(BaseSettings):
    # Supabase (follow_ups store)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    FOLLOW_UPS_TABLE: str = "follow_ups"

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Telegram notification channel
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_CHAT_ID: str = ""
    TELEGRAM_API_BASE: str = "https://api.telegram.org"
    NOTIFICATION_TIMEOUT_SECONDS: int = 10
    DISPLAY_TIMEZONE: str = "America/Chicago"

    # Monday.com boards
    MONDAY_EMAIL: str = ""
    MONDAY_PASSWORD: str = ""
    MONDAY_LOGIN_URL: str = "https://auth.monday.com/users/sign_in"
    MONDAY_BOARDS: Dict[str, str] = {
        "Unit Turns": "https://10xpropertymanagers.monday.com/boards/unit-turns",
        "Move-Out Inspections": "https://10xpropertymanagers.monday.com/boards/move-out-inspections",
        "Reno Projects": "https://10xpropertymanagers.monday.com/boards/renovations",
        "New Onboarding": "https://10xpropertymanagers.monday.com/boards/onboarding",
        "Field Visits": "https://10xpropertymanagers.monday.com/boards/field-visits",
    }

    # Property Meld projects (unit turns)
    PROPERTY_MELD_EMAIL: str = ""
    PROPERTY_MELD_PASSWORD: str = ""
    PROPERTY_MELD_LOGIN_URL: str = "https://app.propertymeld.com/login"
    PROPERTY_MELD_PROJECTS_URL: str = (
        "https://app.propertymeld.com/2197/m/2197/projects/?completed=false&order_by=due_date"
    )
    PROPERTY_MELD_DUE_HOURS: int = 7 * 24

    # Browser automation budgets
    CONNECTOR_PAGE_TIMEOUT_SECONDS: int = 30
    CONNECTOR_ELEMENT_TIMEOUT_SECONDS: int = 10
    BOARD_SETTLE_SECONDS: float = 3.0

    # Normalizer defaults
    DEFAULT_DUE_HOURS: int = 48
    REMIND_AFTER_HOURS: int = 12

    # Scheduler Settings
    ENABLE_SCHEDULER: bool = False
    REMINDER_SWEEP_MINUTE: int = 0  # minute past every hour

    # Cron API Key for external trigger
    CRON_API_KEY: str = "change-me-in-production"

    class Config:
        env_file = ".env"


settings = Settings()
