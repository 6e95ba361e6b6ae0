from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class LlmConfig(BaseSettings):
    """Model selection and provider credentials."""

    model_id: str = Field(
        default="gemini-1.5-flash",
        validation_alias="LLM_MODEL_ID",
    )
    gemini_api_key: SecretStr | None = Field(
        default=None,
        validation_alias="GEMINI_API_KEY",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        validation_alias="GEMINI_BASE_URL",
    )
    groq_api_key: SecretStr | None = Field(
        default=None,
        validation_alias="GROQ_API_KEY",
    )
    groq_base_url: str = Field(
        default="https://api.groq.com",
        validation_alias="GROQ_BASE_URL",
    )
    ollama_base_url: Optional[str] = Field(
        default=None,
        validation_alias="OLLAMA_BASE_URL",
    )
    http_timeout: float = Field(
        default=120.0,
        validation_alias="LLM_HTTP_TIMEOUT",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class InvokerConfig(BaseSettings):
    """Retry policy for the local inference endpoint."""

    max_attempts: int = Field(default=3, ge=1, le=10)
    base_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds to wait before the second attempt; doubles afterwards.",
    )
    timeout: float = Field(
        default=600.0,
        gt=0,
        description="Per-attempt deadline in seconds.",
    )

    model_config = SettingsConfigDict(
        env_prefix="INVOKER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration."""

    region: str = Field(
        default="us-east-1",
        validation_alias="BEDROCK_REGION",
    )
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="BEDROCK_API_KEY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class StorageConfig(BaseSettings):
    """Report cache configuration"""

    backend: Literal["memory", "s3"] = "memory"
    report_key: str = "ctosReport"
    bucket_name: str = "credit-report-cache"
    prefix: str = "reports/"
    region: str = "us-east-1"
    access_key: Optional[str] = None
    secret_key: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class DocumentsConfig(BaseSettings):
    """Location of the seed documents (personal info + transactions)."""

    base_url: Optional[str] = Field(
        default=None,
        description="HTTP origin serving the documents. Takes precedence over root.",
    )
    root: str = "data"
    personal_info_path: str = "ctos-care-demo-v1/bad/personal_info.json"
    transactions_path: str = "ctos-care-demo-v1/bad/transactions.json"
    timeout: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="DOCUMENTS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Credit Report Service"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/report_pipeline.log"

    # LLM providers
    llm: LlmConfig = Field(default_factory=LlmConfig)

    # Retry policy
    invoker: InvokerConfig = Field(default_factory=InvokerConfig)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # Report cache
    storage: StorageConfig = Field(default_factory=StorageConfig)

    # Seed documents
    documents: DocumentsConfig = Field(default_factory=DocumentsConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
