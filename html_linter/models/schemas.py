"""
Pydantic Models and Schemas
===========================

Core data models for diagnostics, lint results, configuration and API
requests/responses. All models include validation and type hints.
"""

from typing import Optional, List, Dict, Any, Union, Literal
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Enums
class Severity(str, Enum):
    """Diagnostic severity levels."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RuleCategory(str, Enum):
    """Rule categories."""

    MARKUP = "markup"
    SEMANTICS = "semantics"
    ACCESSIBILITY = "accessibility"
    PERFORMANCE = "performance"
    SEO = "seo"


class SourceType(str, Enum):
    """Supported source types."""

    HTML = "html"
    MARKDOWN = "markdown"


OFF = "off"
SeverityLevel = Union[Severity, Literal["off"]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Base Models
class BaseTimestamped(BaseModel):
    """Base model with timestamp fields."""

    created_at: datetime = Field(default_factory=_utcnow)


# Diagnostics
class Diagnostic(BaseModel):
    """A single problem reported by a rule."""

    rule_id: str = Field(..., description="Rule identifier")
    severity: Severity = Field(..., description="Effective severity")
    category: Optional[RuleCategory] = Field(None, description="Rule category")
    message: str = Field(..., description="Human readable message")
    line: int = Field(1, ge=1, description="1-based line")
    column: int = Field(1, ge=1, description="1-based column")
    tag: Optional[str] = Field(None, description="Element name the problem is attached to")
    selector: Optional[str] = Field(None, description="CSS-like path to the element")
    hint: Optional[str] = Field(None, description="Suggested fix")

    @property
    def sort_key(self) -> tuple:
        return (self.line, self.column, self.rule_id)


class FileResult(BaseModel):
    """Lint result for one source."""

    filename: str = Field("<input>", description="Source name")
    source_type: SourceType = Field(SourceType.HTML, description="Source type")
    diagnostics: List[Diagnostic] = Field(default_factory=list, description="Diagnostics")
    error_count: int = Field(0, ge=0)
    warning_count: int = Field(0, ge=0)
    info_count: int = Field(0, ge=0)
    suppressed_count: int = Field(0, ge=0, description="Diagnostics hidden by directives")
    processing_time: Optional[float] = Field(None, description="Lint time in seconds")

    @model_validator(mode="after")
    def compute_counts(self) -> "FileResult":
        self.error_count = sum(1 for d in self.diagnostics if d.severity == Severity.ERROR)
        self.warning_count = sum(1 for d in self.diagnostics if d.severity == Severity.WARNING)
        self.info_count = sum(1 for d in self.diagnostics if d.severity == Severity.INFO)
        return self

    @property
    def problem_count(self) -> int:
        return len(self.diagnostics)


class LintReport(BaseTimestamped):
    """Aggregated results for a lint run."""

    results: List[FileResult] = Field(default_factory=list)
    error_count: int = Field(0, ge=0)
    warning_count: int = Field(0, ge=0)
    info_count: int = Field(0, ge=0)
    files_linted: int = Field(0, ge=0)
    processing_time: Optional[float] = None

    @model_validator(mode="after")
    def compute_totals(self) -> "LintReport":
        self.error_count = sum(r.error_count for r in self.results)
        self.warning_count = sum(r.warning_count for r in self.results)
        self.info_count = sum(r.info_count for r in self.results)
        self.files_linted = len(self.results)
        return self

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    def exceeds_warnings(self, max_warnings: Optional[int]) -> bool:
        return max_warnings is not None and max_warnings >= 0 and self.warning_count > max_warnings


# Configuration Models
class RuleSetting(BaseModel):
    """Per-rule configuration."""

    severity: SeverityLevel = Field(..., description="Severity or 'off'")
    options: Dict[str, Any] = Field(default_factory=dict, description="Rule options")


class LintConfig(BaseModel):
    """Lint configuration as loaded from a config file or request."""

    extends: List[str] = Field(default_factory=lambda: ["recommended"])
    rules: Dict[str, Union[SeverityLevel, RuleSetting]] = Field(default_factory=dict)
    ignore: List[str] = Field(default_factory=list, description="Glob patterns to skip")
    report_unused_disables: bool = Field(False)
    max_warnings: Optional[int] = Field(None, ge=0)
    markdown: bool = Field(True, description="Lint html blocks in Markdown files")

    @field_validator("extends", mode="before")
    @classmethod
    def coerce_extends(cls, v: Union[str, List[str], None]) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


class RuleInfo(BaseModel):
    """Public description of a rule."""

    id: str
    category: RuleCategory
    description: str
    default_severity: Severity
    recommended: bool = True
    document_only: bool = False
    default_options: Dict[str, Any] = Field(default_factory=dict)


# API Request/Response Models
class LintRequest(BaseModel):
    """Request model for linting source text."""

    content: str = Field(..., min_length=1, description="HTML or Markdown source")
    filename: str = Field("<input>", description="Name used in diagnostics")
    source_type: Optional[SourceType] = Field(None, description="Detected from filename if omitted")
    fragment: Optional[bool] = Field(None, description="Force fragment mode")
    config: Optional[LintConfig] = Field(None, description="Lint configuration")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Content cannot be empty")
        return v


class LintResponse(BaseModel):
    """Response model for a lint request."""

    success: bool = Field(..., description="True when no error diagnostics were produced")
    result: FileResult
    processing_time: float = Field(..., description="Total processing time")


class RuleListResponse(BaseModel):
    """Response model for rule listing."""

    rules: List[RuleInfo]
    total: int


# Health Check Models
class HealthStatus(BaseModel):
    """Health check status."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(..., description="Overall status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    version: str = Field(..., description="Application version")
    rules_loaded: int = Field(0, ge=0, description="Registered rules")
    presets: List[str] = Field(default_factory=list, description="Available presets")


# Error Models
class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: Any = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")

    model_config = ConfigDict(arbitrary_types_allowed=True)
