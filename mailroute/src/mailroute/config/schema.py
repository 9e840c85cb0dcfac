"""Pydantic models describing mailroute configuration and scenario documents."""
from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ValidationError(ValueError):
    """Raised when configuration data does not satisfy the schema."""


class FolderSettings(BaseModel):
    """Names of the reserved folders and the path separator."""

    model_config = ConfigDict(extra="forbid")

    default: str = "/inbox"
    sent: str = "/sent"
    separator: str = Field(default="/", min_length=1, max_length=1)

    @model_validator(mode="after")
    def _validate_folders(self) -> "FolderSettings":
        sep = self.separator
        for name, value in (("default", self.default), ("sent", self.sent)):
            if not value.startswith(sep) or len(value) == 1 or sep in value[1:]:
                raise ValidationError(f"folders.{name} must be a single top-level segment")
        if self.default == self.sent:
            raise ValidationError("folders.sent must differ from folders.default")
        return self


class RuleSettings(BaseModel):
    """Priority range and parsing strictness for rule definitions."""

    model_config = ConfigDict(extra="forbid")

    min_priority: int = Field(default=1, ge=1)
    max_priority: int = Field(default=10, ge=1)
    reject_unknown_keywords: bool = False

    @model_validator(mode="after")
    def _validate_range(self) -> "RuleSettings":
        if self.max_priority < self.min_priority:
            raise ValidationError("max_priority must be greater than or equal to min_priority")
        return self


class LoggingSettings(BaseModel):
    """Structured logger defaults."""

    model_config = ConfigDict(extra="forbid")

    component: str = "mailroute"
    level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class RuntimeConfig(BaseModel):
    """Root configuration loaded from ``mailroute.yaml``."""

    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = 1
    folders: FolderSettings = Field(default_factory=FolderSettings)
    rules: RuleSettings = Field(default_factory=RuleSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class ScenarioRule(BaseModel):
    """Rule to register for a scenario account."""

    model_config = ConfigDict(extra="forbid")

    folder: str
    priority: int
    definition: str


class ScenarioMail(BaseModel):
    """Raw mail expressed as metadata lines plus a body."""

    model_config = ConfigDict(extra="forbid")

    metadata: str
    body: str


class ScenarioAccount(BaseModel):
    """Account with the folders, rules, and mail to replay for it."""

    model_config = ConfigDict(extra="forbid")

    name: str
    email: str
    folders: List[str] = Field(default_factory=list)
    rules: List[ScenarioRule] = Field(default_factory=list)
    inbox: List[ScenarioMail] = Field(default_factory=list)
    outbox: List[ScenarioMail] = Field(default_factory=list)


class Scenario(BaseModel):
    """Replayable description of accounts, folders, rules, and mail."""

    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = 1
    accounts: List[ScenarioAccount] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_accounts(self) -> "Scenario":
        names = [account.name for account in self.accounts]
        if len(names) != len(set(names)):
            raise ValidationError("account names must be unique")
        return self


__all__ = [
    "ValidationError",
    "FolderSettings",
    "RuleSettings",
    "LoggingSettings",
    "RuntimeConfig",
    "ScenarioRule",
    "ScenarioMail",
    "ScenarioAccount",
    "Scenario",
]
