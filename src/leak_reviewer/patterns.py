"""Secret detection patterns for common credential types."""

import re
from functools import lru_cache
from typing import Iterable

from .models import SecretPattern, Severity


def _pattern(name: str, regex: str, description: str, severity: Severity) -> SecretPattern:
    return SecretPattern(name=name, regex=re.compile(regex), description=description, severity=severity)


# Order matters: findings on one line are reported in this order.
DEFAULT_PATTERNS: tuple[SecretPattern, ...] = (
    # AWS
    _pattern(
        "AWS Access Key ID",
        r"(?:A3T[A-Z0-9]|AKIA|AGPA|AIDA|AROA|AIPA|ANPA|ANVA|ASIA)[A-Z0-9]{16}",
        "AWS Access Key ID detected",
        Severity.CRITICAL,
    ),
    _pattern(
        "AWS Secret Access Key",
        r"(?i)aws(?:.{0,20})?['\"][0-9a-zA-Z/+]{40}['\"]",
        "AWS Secret Access Key detected",
        Severity.CRITICAL,
    ),
    # GitHub
    _pattern(
        "GitHub Personal Access Token",
        r"ghp_[a-zA-Z0-9]{36}",
        "GitHub personal access token detected",
        Severity.CRITICAL,
    ),
    _pattern(
        "GitHub OAuth Token",
        r"gho_[a-zA-Z0-9]{36}",
        "GitHub OAuth access token detected",
        Severity.CRITICAL,
    ),
    _pattern(
        "GitHub App Token",
        r"(?:ghu|ghs)_[a-zA-Z0-9]{36}",
        "GitHub App token detected",
        Severity.CRITICAL,
    ),
    _pattern(
        "GitHub Refresh Token",
        r"ghr_[a-zA-Z0-9]{36}",
        "GitHub refresh token detected",
        Severity.CRITICAL,
    ),
    # OpenAI
    _pattern(
        "OpenAI API Key",
        r"sk-[a-zA-Z0-9]{48}",
        "OpenAI API key detected",
        Severity.CRITICAL,
    ),
    # Slack
    _pattern(
        "Slack Token",
        r"xox[baprs]-[0-9a-zA-Z]{10,48}",
        "Slack token detected",
        Severity.CRITICAL,
    ),
    _pattern(
        "Slack Webhook",
        r"https://hooks\.slack\.com/services/T[a-zA-Z0-9_]+/B[a-zA-Z0-9_]+/[a-zA-Z0-9_]+",
        "Slack webhook URL detected",
        Severity.HIGH,
    ),
    # Generic
    _pattern(
        "Generic API Key",
        r"(?i)(?:api[_-]?key|apikey)\s*[:=]\s*['\"][a-zA-Z0-9]{20,}['\"]",
        "Generic API key pattern detected",
        Severity.HIGH,
    ),
    _pattern(
        "Generic Secret",
        r"(?i)(?:secret|password|passwd|pwd|token)\s*[:=]\s*['\"][^'\"]{8,}['\"]",
        "Generic secret pattern detected",
        Severity.MEDIUM,
    ),
    # Private keys
    _pattern(
        "Private Key",
        r"-----BEGIN (?:RSA|DSA|EC|OPENSSH|PGP) PRIVATE KEY-----",
        "Private key detected",
        Severity.CRITICAL,
    ),
    # Google
    _pattern(
        "Google API Key",
        r"AIza[0-9A-Za-z_\-]{35}",
        "Google API key detected",
        Severity.CRITICAL,
    ),
    _pattern(
        "Google OAuth",
        r"[0-9]+-[0-9A-Za-z_]{32}\.apps\.googleusercontent\.com",
        "Google OAuth client ID detected",
        Severity.HIGH,
    ),
    # Payments / messaging
    _pattern(
        "Stripe API Key",
        r"(?:sk|pk)_(?:test|live)_[0-9a-zA-Z]{24,}",
        "Stripe API key detected",
        Severity.CRITICAL,
    ),
    _pattern(
        "Twilio API Key",
        r"SK[0-9a-fA-F]{32}",
        "Twilio API key detected",
        Severity.CRITICAL,
    ),
    # Tokens and connection strings
    _pattern(
        "JWT Token",
        r"eyJ[A-Za-z0-9_=-]+\.eyJ[A-Za-z0-9_=-]+\.?[A-Za-z0-9_.+/=-]*",
        "JWT token detected",
        Severity.MEDIUM,
    ),
    _pattern(
        "Database Connection String",
        r"(?i)(?:mysql|postgres|mongodb|redis)://\S+:\S+@\S+",
        "Database connection string with credentials detected",
        Severity.CRITICAL,
    ),
)


# Markers that indicate example or placeholder data rather than a live secret
IGNORE_MARKERS: tuple[re.Pattern, ...] = tuple(
    re.compile(marker, re.IGNORECASE)
    for marker in (
        r"example",
        r"sample",
        r"dummy",
        r"test",
        r"fake",
        r"placeholder",
        r"your[_-]?key[_-]?here",
        r"replace[_-]?with",
        r"TODO",
        r"FIXME",
    )
)


def should_ignore(line: str) -> bool:
    """Return True if the line looks like example, test or placeholder data."""
    return any(marker.search(line) for marker in IGNORE_MARKERS)


class PatternSet:
    """An immutable, ordered collection of secret patterns.

    Pattern names are used as identifiers in notifications, so they must be
    unique within a set.
    """

    __slots__ = ("_patterns",)

    def __init__(self, patterns: Iterable[SecretPattern]):
        patterns = tuple(patterns)
        seen: set[str] = set()
        for pattern in patterns:
            if pattern.name in seen:
                raise ValueError(f"Duplicate pattern name: {pattern.name}")
            seen.add(pattern.name)
        self._patterns = patterns

    def patterns(self) -> tuple[SecretPattern, ...]:
        return self._patterns

    def names(self) -> list[str]:
        return [p.name for p in self._patterns]

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self):
        return iter(self._patterns)


@lru_cache(maxsize=1)
def default_pattern_set() -> PatternSet:
    """Return the shared default pattern set, built once per process."""
    return PatternSet(DEFAULT_PATTERNS)
