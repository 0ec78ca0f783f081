"""Shared configuration management for the invoice generator.

Based on Pydantic Settings v2 best practices:
https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PageSize = Literal["A0", "A1", "A2", "A3", "A4", "A5", "A6", "Letter", "Legal", "Tabloid"]
Orientation = Literal["Portrait", "Landscape"]


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with the prefix 'APP_'.
    Example: APP_LOG_LEVEL=debug
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Service configuration
    service_name: str = Field(
        default="invoice-layout-generator",
        description="Service identifier for metrics and logs",
    )
    service_version: str = Field(
        default="0.1.0",
        description="Service version",
    )

    # Layout optimization
    smart_layout_enabled: bool = Field(
        default=True,
        description="Use the trained layout model to tune font size, spacing and template",
    )
    layout_model_path: str = Field(
        default="models/layout_model.pt",
        description="Where the trained layout model is saved and loaded from",
    )
    layout_model_autoload: bool = Field(
        default=True,
        description="Load the layout model from layout_model_path at startup if it exists",
    )
    layout_training_epochs: int = Field(
        default=300,
        ge=1,
        description="Full-batch optimisation steps used when training the layout model",
    )
    layout_learning_rate: float = Field(
        default=0.05,
        gt=0,
        description="Adam learning rate for layout model training",
    )
    layout_hidden_size: int = Field(
        default=32,
        ge=1,
        description="Width of the shared hidden layer of the layout network",
    )
    layout_seed: int = Field(
        default=42,
        description="Seed for weight initialisation and synthetic training data",
    )

    # Training data
    training_data_path: str = Field(
        default="data/training/layout_training.csv",
        description="Where synthetic training data is written",
    )
    training_sample_count: int = Field(
        default=1000,
        ge=1,
        description="Number of synthetic samples generated for training",
    )

    # Templates
    template_dir: str | None = Field(
        default=None,
        description="Directory of invoice templates (defaults to the bundled templates)",
    )
    default_template: str = Field(
        default="invoice_report.html",
        description="Template used for the Standard layout family",
    )

    # PDF rendering
    pdf_page_size: PageSize = Field(
        default="A4",
        description="Page size of generated documents",
    )
    pdf_orientation: Orientation = Field(
        default="Portrait",
        description="Page orientation of generated documents",
    )
    pdf_margin_mm: float = Field(
        default=15.0,
        ge=0,
        description="Page margin in millimeters",
    )
    pdf_title: str | None = Field(
        default=None,
        description="Optional document title written into PDF metadata",
    )

    # Queue configuration (arq + Redis)
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for the background training queue",
    )
    queue_max_jobs: int = Field(
        default=2,
        description="Maximum concurrent jobs per worker",
    )
    queue_job_timeout: int = Field(
        default=600,
        description="Job timeout in seconds",
    )


def get_settings() -> Settings:
    """Factory function to get settings instance.

    Returns:
        Configured Settings instance
    """
    return Settings()
