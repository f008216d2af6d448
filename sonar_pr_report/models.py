"""Data models shared by the report renderers.

Contains:
    - Severity   ordered SonarQube severities
    - RuleKey    "repository:rule" identifier
    - Issue      read-only view of an analysis issue
    - Placement  where the caller decided an issue can be shown
"""

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Any


# ---------------------------------------------------------------------------
# Severity
# ---------------------------------------------------------------------------

@total_ordering
class Severity(Enum):
    INFO = "INFO"
    MINOR = "MINOR"
    MAJOR = "MAJOR"
    CRITICAL = "CRITICAL"
    BLOCKER = "BLOCKER"

    @property
    def rank(self) -> int:
        """Position in the ascending order INFO (0) .. BLOCKER (4)."""
        return _SEVERITY_RANKS[self]

    @classmethod
    def display_order(cls) -> tuple["Severity", ...]:
        """Severities from most to least severe, the order used in reports."""
        return tuple(sorted(cls, key=lambda s: s.rank, reverse=True))

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            known = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown severity '{value}'. Expected one of: {known}") from None

    def __lt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank


_TRUE_STRINGS = ("true", "1", "yes", "on")
_FALSE_STRINGS = ("false", "0", "no", "off")

_SEVERITY_RANKS = {
    Severity.INFO:     0,
    Severity.MINOR:    1,
    Severity.MAJOR:    2,
    Severity.CRITICAL: 3,
    Severity.BLOCKER:  4,
}


# ---------------------------------------------------------------------------
# Rule key
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RuleKey:
    repository: str
    rule: str

    @classmethod
    def parse(cls, value: str) -> "RuleKey":
        """Split ``"java:S1234"`` into its repository and rule parts."""
        repository, sep, rule = value.partition(":")
        if not sep or not repository or not rule:
            raise ValueError(f"Invalid rule key '{value}', expected 'repository:rule'")
        return cls(repository, rule)

    def __str__(self) -> str:
        return f"{self.repository}:{self.rule}"


# ---------------------------------------------------------------------------
# Issue
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Issue:
    component_key: str
    severity: Severity
    rule_key: RuleKey
    message: str
    line: int | None = None
    file_path: str | None = None
    is_new: bool = True

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Issue":
        """Build an issue from a SonarQube ``/api/issues/search`` entry.

        Only ``component``, ``rule``, ``severity`` and ``message`` are
        required. ``line``, ``filePath`` and ``isNew`` are optional; issues
        are considered new unless ``isNew`` says otherwise.

        Raises:
            ValueError: a required field is missing or malformed.
        """
        missing = [k for k in ("component", "rule", "severity", "message") if not raw.get(k)]
        if missing:
            raise ValueError(f"Issue is missing required field(s): {', '.join(missing)}")

        line = raw.get("line")
        return cls(
            component_key=str(raw["component"]),
            severity=Severity.parse(raw["severity"]),
            rule_key=RuleKey.parse(str(raw["rule"])),
            message=str(raw["message"]),
            line=int(line) if line is not None else None,
            file_path=raw.get("filePath"),
            is_new=_flag(raw.get("isNew"), default=True),
        )


@dataclass(frozen=True)
class Placement:
    """Caller's decision for one issue.

    ``can_be_inline`` is true when the issue's line is part of the pull
    request diff. ``file_url`` deep-links to the file on the hosting service
    and is absent for module or project level issues.
    """

    can_be_inline: bool = False
    file_url: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Placement":
        """Read the optional ``inline`` and ``fileUrl`` keys of an issue entry."""
        return cls(
            can_be_inline=_flag(raw.get("inline"), default=False),
            file_url=raw.get("fileUrl") or None,
        )


def _flag(value: Any, default: bool) -> bool:
    """Read a JSON boolean, also accepting "true"/"false" style strings."""
    if isinstance(value, bool):
        return value
    text = "" if value is None else str(value).strip().lower()
    if not text:
        return default
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"Expected a boolean, got '{value}'")
