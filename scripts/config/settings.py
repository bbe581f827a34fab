"""
Centralized configuration using Pydantic settings.

All configuration is loaded from environment variables or .env file
with type validation and sensible defaults.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    log_level: str = Field('INFO', validation_alias='LOG_LEVEL')
    log_format: str = Field('json', validation_alias='LOG_FORMAT', description='Log format: json or text')
    log_dir: str = Field('data/logs', validation_alias='LOG_DIR')
    log_to_file: bool = Field(True, validation_alias='LOG_TO_FILE')

    model_config = SettingsConfigDict(env_prefix='observability_', case_sensitive=False, populate_by_name=True)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f'Log level must be one of {valid_levels}')
        return v

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in ['json', 'text']:
            raise ValueError('Log format must be "json" or "text"')
        return v


class Settings(BaseSettings):
    """Main application settings."""

    # HTTP server
    host: str = Field('0.0.0.0', validation_alias='HOST')
    port: int = Field(3000, validation_alias='PORT')
    debug: bool = Field(False, validation_alias='FLASK_DEBUG')

    # Shared secret for every route under /api
    api_key: str = Field('secret-key', validation_alias='API_KEY', description='Expected x-api-key value')

    # Error bodies carry a stack trace unless this is "production"
    environment: str = Field('development', validation_alias='APP_ENV')

    seed_products: bool = Field(True, validation_alias='SEED_PRODUCTS', description='Load demo products on startup')

    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        populate_by_name=True,
        extra='ignore'
    )

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        if v <= 0 or v > 65535:
            raise ValueError('Port must be between 1 and 65535')
        return v

    @field_validator('api_key')
    @classmethod
    def validate_api_key(cls, v):
        if not v:
            raise ValueError('API key must not be empty')
        return v

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        v = v.lower()
        if v not in ['development', 'test', 'production']:
            raise ValueError('Environment must be one of development, test, production')
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == 'production'


# Global settings instance
settings = Settings()
