"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings

from .accounts import LockPolicy
from .logging_config import validate_log_level


class PaymentEngineConfig(BaseSettings):
    """Payment engine configuration"""

    # Logging configuration
    log_level: str = "WARNING"
    log_format: str = "json"  # json or text

    # Ledger rules configuration
    lock_policy: LockPolicy = LockPolicy.REJECT_ALL

    # Input handling
    skip_invalid_records: bool = False

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v):
        return validate_log_level(v)

    class Config:
        env_prefix = "PAYMENT_ENGINE_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = PaymentEngineConfig()


def get_config() -> PaymentEngineConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> PaymentEngineConfig:
    """Reload configuration from environment"""
    global config
    config = PaymentEngineConfig()
    return config
