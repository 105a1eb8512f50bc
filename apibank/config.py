"""
Configuration Management Module

Centralized configuration using pydantic-settings. Every value can be
overridden with an APIBANK_-prefixed environment variable or a .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class APIBankConfig(BaseSettings):
    """APIBank administrative service configuration"""

    # Database configuration
    database_path: str = "apibank.db"
    use_sqlite: bool = True

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Security configuration
    auth_enabled: bool = True
    jwt_secret: str = "change-me-in-production"
    jwt_expiry_hours: int = 24
    jwt_algorithm: str = "HS256"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None

    # Account rules
    default_currency: str = "USD"
    student_age_threshold: int = 24

    checking_minimum_balance: str = "250"
    checking_monthly_maintenance_fee: str = "12"

    savings_default_minimum_balance: str = "1000"
    savings_min_minimum_balance: str = "100"
    savings_default_interest_rate: str = "0.0025"
    savings_max_interest_rate: str = "0.5"

    credit_card_default_limit: str = "100"
    credit_card_max_limit: str = "100000"
    credit_card_default_interest_rate: str = "0.2"
    credit_card_min_interest_rate: str = "0.1"

    class Config:
        env_prefix = "APIBANK_"
        env_file = ".env"
        case_sensitive = False


config = APIBankConfig()


def get_config() -> APIBankConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> APIBankConfig:
    """Reload configuration from environment"""
    global config
    config = APIBankConfig()
    return config
