"""
Configuration management for the boardroom engine.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings


class BoardroomSettings(BaseSettings):
    """Engine settings with environment variable support (BOARDROOM_*)."""

    # Language model
    llm_config_path: Optional[str] = Field(
        default="configs/llm_config.yaml",
        description="LiteLLM YAML config; None or a missing file runs without a model",
    )
    llm_timeout_seconds: float = Field(default=20.0, gt=0, description="Bound on every model call")

    # Permissions
    financial_approval_threshold: float = Field(
        default=1000.0, ge=0, description="financial_transaction amounts above this need approval"
    )
    auto_approve_routine: bool = Field(default=True, description="Auto-approve routine actions")
    require_approval_for_communications: bool = Field(
        default=True, description="Gate email, SMS and phone calls"
    )

    # Memory
    conversation_limit: int = Field(default=30, ge=1, description="Messages kept per agent")
    learnings_limit: int = Field(default=15, ge=1, description="Learnings kept per agent")

    # Action gateway
    gateway_base_url: Optional[str] = Field(default=None, description="Functions host for external actions")
    gateway_api_key: Optional[str] = Field(default=None, description="Bearer token for the functions host")
    gateway_timeout_seconds: float = Field(default=15.0, gt=0, description="Bound on every gateway call")

    # Audit
    audit_store_path: Optional[str] = Field(
        default=None, description="Directory for JSON audit tables (in-memory if unset)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Render logs as JSON lines")

    model_config = {
        "env_file": ".env",
        "env_prefix": "BOARDROOM_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @classmethod
    def load_from_file(cls, config_path: Path) -> "BoardroomSettings":
        """Load settings from a YAML file; environment variables are not overridden by missing keys."""
        config_path = Path(config_path)
        if not config_path.exists():
            return cls()

        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    def save_to_file(self, config_path: Path) -> None:
        """Save settings to a YAML file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False, indent=2)
