"""Pydantic models for the pull request reviewer."""

import re
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class Severity(str, Enum):
    """Severity of a detected secret, ordered from most to least severe."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """Lower rank means more severe."""
        return SEVERITY_ORDER.index(self)

    @classmethod
    def coerce(cls, value: "str | Severity") -> "Severity":
        """Map any value to a known severity, falling back to LOW."""
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.LOW


SEVERITY_ORDER: tuple[Severity, ...] = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
)


class SecretPattern(BaseModel):
    """A named detection rule for one kind of credential."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Stable rule name, e.g. 'AWS Access Key ID'")
    regex: re.Pattern = Field(description="Compiled matcher searched within each line")
    description: str = Field(description="Human readable description of the match")
    severity: Severity = Field(description="Severity assigned to every match of this rule")


class Finding(BaseModel):
    """A potential secret detected on an added or context line of a patch."""

    model_config = ConfigDict(frozen=True)

    pattern: str = Field(description="Name of the rule that matched")
    file_path: str = Field(description="Path of the changed file")
    line_number: int = Field(ge=1, description="1-based line number within the patch")
    severity: Severity = Field(description="Severity of the matched rule")
    description: str = Field(description="Description of the matched rule")

    @field_validator("severity", mode="before")
    @classmethod
    def _known_severity(cls, value):
        return Severity.coerce(value)


class ChangedFile(BaseModel):
    """A single file change in a pull request."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    filename: str = Field(description="Path of the file in the head revision")
    status: str = Field(default="modified", description="added, modified, removed, renamed, ...")
    additions: int = Field(default=0, description="Number of added lines")
    deletions: int = Field(default=0, description="Number of removed lines")
    changes: int = Field(default=0, description="Total number of changed lines")
    patch: str = Field(default="", description="Unified diff hunks for this file")

    @field_validator("patch", mode="before")
    @classmethod
    def _empty_patch(cls, value):
        # binary files and pure renames come back without a patch
        return value or ""


class ScanResult(BaseModel):
    """Aggregate result of scanning a set of changed files."""

    model_config = ConfigDict(frozen=True)

    findings: list[Finding] = Field(default_factory=list, description="Findings in discovery order")
    total_files: int = Field(default=0, description="Number of files scanned")
    scanned_at: Optional[datetime] = Field(default=None, description="When the scan completed")

    @computed_field
    @property
    def found(self) -> bool:
        return len(self.findings) > 0


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: str = ""
    id: int = 0
    avatar_url: str = ""


class GitRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ref: str = ""
    sha: str = ""


class PullRequest(BaseModel):
    """Pull request snapshot carried by the webhook payload."""

    model_config = ConfigDict(extra="ignore")

    number: int
    title: str = ""
    html_url: str = ""
    state: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: User = Field(default_factory=User)
    head: GitRef = Field(default_factory=GitRef)
    base: GitRef = Field(default_factory=GitRef)


class Repository(BaseModel):
    """Repository snapshot carried by the webhook payload."""

    model_config = ConfigDict(extra="ignore")

    id: int = 0
    name: str
    full_name: str = ""
    private: bool = False
    owner: User = Field(default_factory=User)


class WebhookEvent(BaseModel):
    """The subset of a GitHub pull_request event the reviewer needs."""

    model_config = ConfigDict(extra="ignore")

    action: str = ""
    pull_request: PullRequest
    repository: Repository


class ReviewContext(BaseModel):
    """Everything the notification builders need for one review run."""

    model_config = ConfigDict(frozen=True)

    repository: Repository
    pull_request: PullRequest
    files: list[ChangedFile] = Field(default_factory=list)
    scan_result: ScanResult
