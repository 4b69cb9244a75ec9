"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

import os
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field, field_validator


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(default=["GET", "POST", "PUT", "OPTIONS"])
    allow_headers: list[str] = Field(default=["*"])


class RateLimiterConfig(BaseModel):
    """Rate limiter configuration for the authentication endpoints."""

    requests: int = Field(
        default=100, description="Number of requests allowed per window"
    )
    window_ms: int = Field(
        default=15 * 60 * 1000, description="Time window in milliseconds"
    )
    enabled: bool = Field(default=True, description="Enable rate limiting")
    per_endpoint: bool = Field(
        default=True, description="Apply rate limiting per endpoint"
    )
    per_method: bool = Field(
        default=True, description="Apply rate limiting per HTTP method"
    )


class SecurityConfig(BaseModel):
    """Key material and cryptographic parameters.

    Secrets are never given defaults here; they arrive through environment
    substitution in config.yaml and are checked when the application starts.
    """

    jwt_secret: str | None = Field(
        default=None, description="Secret used to sign and verify access tokens"
    )
    encryption_key: str | None = Field(
        default=None,
        description="Secret for the sensitive-field key (64 hex chars or any passphrase)",
    )
    token_ttl_seconds: int = Field(
        default=24 * 3600, gt=0, description="Access token lifetime in seconds"
    )
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256", description="HMAC algorithm used for access tokens"
    )
    jwt_issuer: str = Field(default="idvault", description="Issuer claim for tokens")
    bcrypt_rounds: int = Field(
        default=12, ge=4, le=31, description="bcrypt cost factor (log2 rounds)"
    )
    associated_data: str = Field(
        default="additional-auth-data",
        description="Non-secret associated data bound into every field encryption",
    )

    @field_validator("jwt_secret", "encryption_key", mode="before")
    @classmethod
    def _empty_secret_is_missing(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ValidationPolicyConfig(BaseModel):
    """Structural rules enforced before anything is persisted."""

    min_password_length: int = Field(default=8, ge=1)
    max_password_bytes: int = Field(
        default=72, ge=1, le=72, description="bcrypt only reads the first 72 bytes"
    )
    email_pattern: str = Field(
        default=r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"
    )
    phone_pattern: str = Field(default=r"^[+]?[0-9\s\-\(\)]{10,20}$")
    sensitive_id_pattern: str = Field(default=r"^\d{12}$")


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default="logs/app.log", description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./idvault.db", description="Database connection URL"
    )
    environment_mode: Literal["development", "production", "test"] = Field(
        default="development", description="Controls where the password is read from"
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )
    auto_create: bool = Field(
        default=True, description="Create missing tables when the application starts"
    )

    @computed_field
    @property
    def password(self) -> str | None:
        """Resolve the database password from a secrets file or environment variable.

        Inline passwords in the URL are only honoured outside production; the
        file takes precedence over the environment variable.
        """
        if self.password_file:
            try:
                with open(self.password_file) as f:
                    return f.read().strip()
            except OSError as e:
                raise ValueError("Failed to read database password from file.") from e

        if self.password_env_var:
            password = os.getenv(self.password_env_var)
            if password:
                return password
            if self.environment_mode == "production":
                raise ValueError(
                    f"Environment variable {self.password_env_var} not set"
                )
        return None

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string with the resolved password."""
        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)

        if base_url.password:
            if self.environment_mode == "production":
                logger.warning(
                    "Database URL contains a password in production mode; "
                    "use password_file or password_env_var instead."
                )
            return base_url.render_as_string(hide_password=False)

        resolved_password = self.password
        if resolved_password and base_url.host:
            base_url = base_url.set(password=resolved_password)
        return base_url.render_as_string(hide_password=False)


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def base_url(self) -> str:
        """Construct the base URL from host and port."""
        scheme = "https" if self.environment == "production" else "http"
        return f"{scheme}://{self.host}:{self.port}"


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Keys and crypto parameters"
    )
    validation: ValidationPolicyConfig = Field(
        default_factory=ValidationPolicyConfig, description="Input validation policy"
    )
    rate_limiter: RateLimiterConfig = Field(
        default_factory=RateLimiterConfig, description="Rate limiter configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
