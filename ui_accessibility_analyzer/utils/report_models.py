# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Pydantic models for accessibility analysis reports.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Enum for issue severity levels."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ComplianceStatus(str, Enum):
    """Enum for WCAG criterion status."""

    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class Priority(str, Enum):
    """Enum for recommendation priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ReportModel(BaseModel):
    """Base model: immutable, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class SourceLocation(ReportModel):
    """Model for an issue location in the analyzed source."""

    line: Optional[int] = None
    column: Optional[int] = None
    source_start: Optional[int] = None
    source_end: Optional[int] = None


class Issue(ReportModel):
    """
    Model for a single reported issue.

    Analyzer-specific details (``value``, ``delay``, ``pattern``...) are kept
    as extra fields under their original names.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    type: Optional[str] = None
    category: str
    severity: Union[Severity, str]
    message: str
    element_ref: Optional[str] = None
    suggestion: Optional[str] = None
    wcag: List[str] = Field(default_factory=list)
    source: Optional[str] = None
    location: Optional[SourceLocation] = None
    action_id: Optional[str] = None


class Recommendation(ReportModel):
    """Model for a prioritized remediation recommendation."""

    priority: Union[Priority, str]
    title: str
    description: str
    suggestion: str
    impact: str
    wcag: List[str] = Field(default_factory=list)
    category: str
    issue_id: Optional[str] = None


class WCAGCriterionStatus(ReportModel):
    """Model for one tracked WCAG criterion and the issues mapped to it."""

    id: str
    name: str
    level: str
    description: str
    category: str
    status: Union[ComplianceStatus, str] = ComplianceStatus.PASS
    issues: List[str] = Field(default_factory=list)


class Scores(ReportModel):
    """Model for category and overall scores, each in [0, 100]."""

    overall: int = 100
    keyboard: int = 100
    aria: int = 100
    focus: int = 100
    widgets: int = 100


class Report(ReportModel):
    """Model for a complete accessibility analysis report."""

    timestamp: str
    analysis_time: int = 0
    source: Optional[str] = None
    scores: Scores = Field(default_factory=Scores)
    grade: str = "A"
    issues: List[Issue] = Field(default_factory=list)
    issues_by_category: Dict[str, int] = Field(default_factory=dict)
    issues_by_severity: Dict[str, int] = Field(default_factory=dict)
    wcag_compliance: Dict[str, WCAGCriterionStatus] = Field(default_factory=dict)
    recommendations: List[Recommendation] = Field(default_factory=list)
    statistics: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    analyzer_results: Dict[str, Any] = Field(default_factory=dict)
    widget_validation: Optional[Dict[str, Any]] = None

    @computed_field(alias="wcagLevel")
    @property
    def wcag_level(self) -> str:
        return self.get_wcag_level()

    def has_errors(self) -> bool:
        return any(issue.severity == Severity.ERROR.value for issue in self.issues)

    def has_warnings(self) -> bool:
        return any(issue.severity == Severity.WARNING.value for issue in self.issues)

    def is_accessible(self) -> bool:
        """True when no error-severity issue was found."""
        return not self.has_errors()

    def get_wcag_level(self) -> str:
        """
        Conformance level reached by the tracked criteria.

        Returns:
            "None" if any Level A criterion fails, "A" if only Level AA
            criteria fail, otherwise "AA"
        """
        failed_levels = {
            criterion.level
            for criterion in self.wcag_compliance.values()
            if criterion.status == ComplianceStatus.FAIL.value
        }
        if "A" in failed_levels:
            return "None"
        if "AA" in failed_levels:
            return "A"
        return "AA"

    def get_issues_by_severity(self, severity: Union[Severity, str]) -> List[Issue]:
        severity = severity.value if isinstance(severity, Severity) else severity
        return [issue for issue in self.issues if issue.severity == severity]

    def get_issues_by_category(self, category: str) -> List[Issue]:
        return [issue for issue in self.issues if issue.category == category]

    def get_errors(self) -> List[Issue]:
        return self.get_issues_by_severity(Severity.ERROR)

    def get_warnings(self) -> List[Issue]:
        return self.get_issues_by_severity(Severity.WARNING)

    def get_failed_criteria(self) -> List[WCAGCriterionStatus]:
        return [c for c in self.wcag_compliance.values() if c.status == ComplianceStatus.FAIL.value]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "Report":
        return cls.model_validate_json(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Report":
        return cls.model_validate(data)
