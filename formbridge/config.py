"""
FormBridge - Application Configuration
=======================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads environment variables (or a .env file),
       validates types/ranges, and exposes a singleton ``settings`` object.
Who:   Imported by main.py and the routes; the content store client never
       reads it directly and receives a ContentStoreConfig instead.
When:  Loaded once at import time; the credential is validated at startup.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ContentStoreConfig(BaseModel):
    """
    Everything the GitHub content store client needs, passed at construction.

    Attributes:
        token:    Bearer credential for the contents API
        owner:    Repository owner (user or organisation)
        repo:     Repository name
        api_url:  API root, overridable for GitHub Enterprise
        branch:   Target branch; None means the repository default branch
        timeout:  Per-request timeout in seconds
    """

    token: str
    owner: str
    repo: str
    api_url: str = "https://api.github.com"
    branch: Optional[str] = None
    timeout: float = 30.0

    model_config = {"frozen": True}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Only GITHUB_TOKEN is mandatory. Everything else has a default matching
    the deployment this service was built for.
    """

    # ── GitHub content store ──────────────────────────────────────────────
    github_token: str = Field(
        default="",
        description="Bearer token with contents:write access to the target repository",
    )
    github_owner: str = Field(default="DanGreiner33")
    github_repo: str = Field(default="doorables-tracker")
    github_branch: Optional[str] = Field(default=None)
    github_api_url: str = Field(default="https://api.github.com")
    github_timeout: float = Field(default=30.0, gt=0, le=300)

    # ── Submission variant ────────────────────────────────────────────────
    # price:   set_name/store/price/date_seen → prices.json
    # catalog: contributorName/series/rarity/estimatedValue → submissions.json
    submission_variant: str = Field(default="price")

    # Overrides for the variant's fixed file locations
    records_path: Optional[str] = Field(default=None)
    images_dir: Optional[str] = Field(default=None)

    @field_validator("submission_variant")
    @classmethod
    def validate_variant(cls, v: str) -> str:
        """Ensures the variant is one the service knows how to build records for."""
        valid = {"price", "catalog"}
        lower = v.strip().lower()
        if lower not in valid:
            raise ValueError(f"Invalid submission_variant '{v}'. Must be one of: {valid}")
        return lower

    # ── Conditional write retry ───────────────────────────────────────────
    # A stale sha on the record-list write re-reads, re-appends and re-writes.
    # 1 attempt means a conflict surfaces immediately as a 500.
    conflict_retry_attempts: int = Field(default=3, ge=1, le=10)
    conflict_retry_min_wait: float = Field(default=0.5, ge=0, le=30)
    conflict_retry_max_wait: float = Field(default=4.0, ge=0, le=120)

    # ── CORS ──────────────────────────────────────────────────────────────
    # The form is embedded in public pages, so every origin is allowed by default.
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required(self) -> None:
        """
        What:  Validates that the settings the service cannot run without are present.
        When:  Called before the server starts (``python -m formbridge``) and
               again from the application lifespan under uvicorn.
        Raises: ValueError listing every problem found.
        """
        errors = []
        if not self.github_token.strip():
            errors.append(
                "GITHUB_TOKEN is not set. Create a fine-grained token with "
                "'Contents: read and write' on the target repository."
            )
        if not self.github_owner or not self.github_repo:
            errors.append("GITHUB_OWNER and GITHUB_REPO must both be set.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )

    def content_store_config(self) -> ContentStoreConfig:
        """Builds the explicit configuration handed to the content store client."""
        return ContentStoreConfig(
            token=self.github_token,
            owner=self.github_owner,
            repo=self.github_repo,
            api_url=self.github_api_url,
            branch=self.github_branch or None,
            timeout=self.github_timeout,
        )


# Singleton instance imported throughout the application
settings = Settings()
