"""Line-oriented scanning of pull request patches for secrets."""

import logging
from typing import Iterable, Optional

from .models import ChangedFile, Finding, ScanResult, Severity
from .patterns import PatternSet, default_pattern_set, should_ignore

logger = logging.getLogger(__name__)

# Removed lines in a unified diff start with this marker
REMOVAL_MARKER = "-"

RECOMMENDATIONS = {
    Severity.CRITICAL: "Rotate this credential immediately and remove from codebase.",
    Severity.HIGH: "Rotate this credential and use environment variables instead.",
    Severity.MEDIUM: "Consider using environment variables for this value.",
    Severity.LOW: "Review if this should be in the codebase.",
}


def get_recommendation(severity: Severity) -> str:
    """Generate a recommendation based on the finding severity."""
    return RECOMMENDATIONS.get(severity, "Review this finding.")


class SecretScanner:
    """Scans diff text for secrets using a fixed pattern set."""

    def __init__(self, pattern_set: Optional[PatternSet] = None):
        self.pattern_set = pattern_set if pattern_set is not None else default_pattern_set()

    def scan_diff(self, text: str, file_path: str) -> list[Finding]:
        """
        Scan one patch for secrets.

        Removed lines and lines carrying example/placeholder markers are
        skipped. Every pattern is tested against every remaining line, so one
        line can produce several findings.

        Args:
            text: Patch text of a single file
            file_path: Path reported in each finding

        Returns:
            List of Finding objects in line order, then pattern order
        """
        findings: list[Finding] = []
        if not text:
            return findings

        for line_number, line in enumerate(text.split("\n"), start=1):
            line = line.rstrip("\r")
            if line.startswith(REMOVAL_MARKER):
                continue
            if should_ignore(line):
                continue

            for pattern in self.pattern_set.patterns():
                if pattern.regex.search(line):
                    findings.append(
                        Finding(
                            pattern=pattern.name,
                            file_path=file_path,
                            line_number=line_number,
                            severity=pattern.severity,
                            description=pattern.description,
                        )
                    )

        return findings

    def scan_files(self, files: Iterable[ChangedFile]) -> ScanResult:
        """
        Scan every changed file and aggregate the findings.

        Files without a patch (binary changes, pure renames) are still counted.
        The scan timestamp is left for the caller to stamp.
        """
        files = list(files)
        findings: list[Finding] = []

        for changed in files:
            file_findings = self.scan_diff(changed.patch, changed.filename)
            if file_findings:
                logger.debug(f"{len(file_findings)} finding(s) in {changed.filename}")
            findings.extend(file_findings)

        return ScanResult(findings=findings, total_files=len(files))
