"""Severity classification of scan findings."""

from pydantic import BaseModel, Field

from .models import SEVERITY_ORDER, Finding, ScanResult, Severity


class SeverityBreakdown(BaseModel):
    """Findings partitioned into severity buckets, most severe first."""

    buckets: dict[Severity, list[Finding]] = Field(
        default_factory=lambda: {severity: [] for severity in SEVERITY_ORDER}
    )

    @property
    def critical_count(self) -> int:
        return len(self.buckets[Severity.CRITICAL])

    @property
    def has_blocking_severity(self) -> bool:
        """Whether any finding should block the merge."""
        return self.critical_count > 0

    def count(self, severity: Severity) -> int:
        return len(self.buckets[severity])

    def non_empty(self) -> list[tuple[Severity, list[Finding]]]:
        return [(severity, self.buckets[severity]) for severity in SEVERITY_ORDER if self.buckets[severity]]


def classify(result: ScanResult) -> SeverityBreakdown:
    """Partition findings by severity, keeping discovery order within a bucket."""
    breakdown = SeverityBreakdown()
    for finding in result.findings:
        breakdown.buckets[Severity.coerce(finding.severity)].append(finding)
    return breakdown
