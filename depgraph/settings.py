from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .taxonomy import TypeTaxonomy


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default)


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Credentials come from the environment (or .env), never from source.
    user: str = Field(default_factory=lambda: _env("JIRA_USER"))
    password: str = Field(default_factory=lambda: _env("JIRA_PASSWORD"))
    jira_url: str = Field(default_factory=lambda: _env("JIRA_URL", "https://jira.di2e.net"))

    projects: list[str] = Field(default_factory=lambda: ["PIR"])

    capability_issue_type: str = Field(
        "New Capability",
        validation_alias=AliasChoices("capability-issue-type", "capablity-issue-type", "capability_issue_type"),
    )
    feature_issue_type: str = Field("New Feature", alias="feature-issue-type")
    requirement_issue_type: str = Field("Requirement", alias="requirement-issue-type")
    thread_issue_type: str = Field("Thread", alias="thread-issue-type")

    parent_link: str = Field("is parent of", alias="parent-link")
    child_link: str = Field("is a child of", alias="child-link")
    traces_to_link: str = Field("traces to", alias="traces-to-link")
    traces_from_link: str = Field("traces from", alias="traces-from-link")
    depends_link_out: str = Field("depends on", alias="depends-link-out")
    depends_link_in: str = Field("is a dependency of", alias="depends-link-in")
    process_prefix: str = Field("process_", alias="process-prefix")

    debug: bool = Field(default_factory=lambda: _env("DEPGRAPH_DEBUG", "0") == "1")
    output_file: str = Field("output.json", alias="output-file")
    integrity_policy: Literal["report", "repair", "trim"] = Field("report", alias="integrity-policy")
    page_size: int = Field(100, alias="page-size", gt=0)
    thread_finish_field: str = Field("customfield_13008", alias="thread-finish-field")

    @classmethod
    def load(cls, path: str | Path) -> "Settings":
        """Read a JSON config file; keys it omits keep their defaults."""
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"cannot read config {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"config {path} must contain a JSON object")
        # Empty strings in the file mean "use the default".
        raw = {k: v for k, v in raw.items() if v not in ("", None)}
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError(f"invalid config {path}: {exc}") from exc

    def valid(self) -> bool:
        return bool(self.user and self.password and self.jira_url)

    def issue_types(self) -> list[str]:
        return [
            self.capability_issue_type,
            self.feature_issue_type,
            self.requirement_issue_type,
            self.thread_issue_type,
        ]

    def taxonomy(self) -> TypeTaxonomy:
        return TypeTaxonomy(
            capability_type=self.capability_issue_type,
            feature_type=self.feature_issue_type,
            requirement_type=self.requirement_issue_type,
            thread_type=self.thread_issue_type,
            parent_link=self.parent_link,
            child_link=self.child_link,
            traces_to_link=self.traces_to_link,
            traces_from_link=self.traces_from_link,
            depends_link_out=self.depends_link_out,
            depends_link_in=self.depends_link_in,
            process_prefix=self.process_prefix,
        )

    def redacted(self) -> dict:
        out = self.model_dump()
        if out.get("password"):
            out["password"] = "********"
        return out
