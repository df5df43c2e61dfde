"""
condrules Configuration — pydantic-settings based.

All settings are read from environment variables (prefix ``CONDRULES_``) or a
.env file. Every value has a default, so importing this module never fails.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Analyzer-wide settings sourced from environment variables."""

    # ── Target ──
    rules_method: str = Field(
        default="rules",
        description="Name of the method whose body is analyzed for rule sets",
    )

    # ── Helper methods ──
    helper_methods: list[str] = Field(
        default=["additionalRules", "baseRules", "commonRules"],
        description="Sibling methods whose first array return is cached for $this->name() calls",
    )
    placeholder_methods: list[str] = Field(
        default=["baseRules", "commonRules"],
        description="Helper calls that resolve to a '_notice' placeholder when no declaration is cached",
    )

    # ── Rule tokens ──
    rule_separator: str = Field(
        default="|", description="Separator between rule tokens in a pipe-style rule string"
    )
    else_description: str = Field(
        default="Default case", description="Description carried by else-branch markers"
    )

    model_config = {
        "env_prefix": "CONDRULES_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Shared instance used by the analyzer modules
settings = Settings()
