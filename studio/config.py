from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./studio.db"
    COMPANY_NAME: str = "Interior Design Studio"
    COMPANY_EMAIL: str = "hello@studio.co.ke"
    COMPANY_PHONE: str = ""
    COMPANY_ADDRESS: str = "Nairobi, Kenya"
    CURRENCY_PREFIX: str = "Ksh"

    # Quote defaults
    DEFAULT_TAX_RATE: float = 16.0
    DEFAULT_PROFIT_MARGIN: float = 25.0
    QUOTE_VALID_DAYS: int = 30

    # Per-person ceiling on the NSSF contribution amount. Unset = uncapped.
    NSSF_PER_PERSON_CAP: Optional[float] = None

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"

    class Config:
        env_file = ".env"


settings = Settings()
