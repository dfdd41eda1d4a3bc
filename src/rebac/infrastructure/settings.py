"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
import json
from typing import Annotated

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from codegen.domain.classification import (
    DEFAULT_ACCESSOR_SUFFIXES,
    AccessorClassification,
)


class SpiceDBSettings(BaseSettings):
    """SpiceDB connection settings.

    Environment variables:
        REBAC_SPICEDB_ENDPOINT: gRPC endpoint (default: localhost:50051)
        REBAC_SPICEDB_PRESHARED_KEY: Pre-shared key (required in production)
        REBAC_SPICEDB_USE_TLS: Use a TLS channel (default: false)
        REBAC_SPICEDB_CERT_PATH: CA certificate for TLS (optional)
        REBAC_SPICEDB_FULLY_CONSISTENT: Evaluate at the newest revision (default: true)
    """

    model_config = SettingsConfigDict(
        env_prefix="REBAC_SPICEDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    endpoint: str = Field(default="localhost:50051", description="SpiceDB gRPC endpoint")
    preshared_key: SecretStr = Field(
        default=SecretStr(""),
        description="SpiceDB pre-shared key",
    )
    use_tls: bool = Field(default=False, description="Use a TLS channel")
    cert_path: str | None = Field(
        default=None,
        description="Path to a CA certificate for TLS",
    )
    fully_consistent: bool = Field(
        default=True,
        description="Evaluate reads and checks at the newest revision",
    )

    @model_validator(mode="after")
    def validate_cert_path(self) -> "SpiceDBSettings":
        """A certificate only makes sense on a TLS channel."""
        if self.cert_path and not self.use_tls:
            raise ValueError("cert_path requires use_tls to be enabled")
        return self


class CodegenSettings(BaseSettings):
    """Entity generation settings.

    Environment variables:
        REBAC_CODEGEN_SCHEMA_PATH: JSON authorization model (default: fga-model.json)
        REBAC_CODEGEN_OUTPUT_PATH: Generated module (default: authorization_entities.py)
        REBAC_CODEGEN_ACCESSOR_SUFFIXES: Type-name suffixes that mark accessors,
            comma separated or a JSON list
    """

    model_config = SettingsConfigDict(
        env_prefix="REBAC_CODEGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    schema_path: str = Field(
        default="fga-model.json",
        description="Path to the JSON authorization model",
    )
    output_path: str = Field(
        default="authorization_entities.py",
        description="Path of the generated Python module",
    )
    accessor_suffixes: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_ACCESSOR_SUFFIXES),
        description="Type-name suffixes that classify a resource as an accessor",
    )

    @field_validator("accessor_suffixes", mode="before")
    @classmethod
    def split_suffixes(cls, value: object) -> object:
        """Accept a comma separated string or a JSON list."""
        if isinstance(value, str):
            if value.lstrip().startswith("["):
                return json.loads(value)
            return [s.strip() for s in value.split(",") if s.strip()]
        return value

    @property
    def classification(self) -> AccessorClassification:
        return AccessorClassification.from_suffixes(self.accessor_suffixes)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="REBAC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="typed-rebac", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def spicedb(self) -> SpiceDBSettings:
        """Get SpiceDB settings."""
        return get_spicedb_settings()

    @property
    def codegen(self) -> CodegenSettings:
        """Get codegen settings."""
        return get_codegen_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_spicedb_settings() -> SpiceDBSettings:
    """Get cached SpiceDB settings."""
    return SpiceDBSettings()


@lru_cache
def get_codegen_settings() -> CodegenSettings:
    """Get cached codegen settings."""
    return CodegenSettings()
