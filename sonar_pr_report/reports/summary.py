"""Global pull request report.

Usage:
    report = GlobalReport(ReportOptions(server_base_url="https://sonar.example.com"))
    for issue, placement in issues:
        report.process(issue, placement.file_url, placement.can_be_inline)
    markdown = report.render()
    blocking = report.has_blocking_issues()

Issues that can be attached to a changed line are left to inline comments
and only counted here. All the others are listed in the summary, in the
order they were processed, up to ``max_global_issues`` entries.
"""

from dataclasses import dataclass
from enum import Enum

from sonar_pr_report.models import Issue, Severity
from sonar_pr_report.reports.markdown import (
    global_issue_markdown,
    pluralize,
    severity_image_markdown,
)

DEFAULT_MAX_GLOBAL_ISSUES = 100

_BLOCKING_SEVERITIES = (Severity.BLOCKER, Severity.CRITICAL)

_WATCH_COMMENTS = "Watch the comments in this conversation to review them."
_NOT_MODIFIED_NOTE = (
    "Note: The following issues were found on lines that were not modified in the pull request. "
    "Because these issues can't be reported as line comments, they are summarized here:"
)


@dataclass(frozen=True)
class ReportOptions:
    server_base_url: str
    inline_comments_enabled: bool = True
    max_global_issues: int = DEFAULT_MAX_GLOBAL_ISSUES
    tool_name: str = "SonarQube"

    def __post_init__(self) -> None:
        if self.max_global_issues < 1:
            raise ValueError(f"max_global_issues must be positive, got {self.max_global_issues}")


class ReportLayout(Enum):
    NO_ISSUES = "no_issues"
    ALL_INLINE = "all_inline"
    ALL_GLOBAL = "all_global"
    MIXED = "mixed"


class GlobalReport:
    """Accumulates the new issues of one analysis and renders the summary comment."""

    def __init__(self, options: ReportOptions) -> None:
        self.options = options
        self._counts: dict[Severity, int] = {s: 0 for s in Severity}
        self._global_issues: list[tuple[Issue, str | None]] = []
        self._has_inline_issue = False

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    def process(self, issue: Issue, file_url: str | None = None, can_be_inline: bool = False) -> bool:
        """Record one issue. Returns False when the issue is ignored.

        Pre-existing issues (``is_new`` false) are never reported.
        """
        if not issue.is_new:
            return False

        self._counts[issue.severity] += 1
        if self.options.inline_comments_enabled and can_be_inline:
            self._has_inline_issue = True
        else:
            self._global_issues.append((issue, file_url))
        return True

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def severity_counts(self) -> dict[Severity, int]:
        return dict(self._counts)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    @property
    def global_issue_count(self) -> int:
        return len(self._global_issues)

    @property
    def displayed_global_issue_count(self) -> int:
        return min(len(self._global_issues), self.options.max_global_issues)

    @property
    def has_inline_issue(self) -> bool:
        return self._has_inline_issue

    @property
    def is_truncated(self) -> bool:
        return len(self._global_issues) > self.options.max_global_issues

    @property
    def layout(self) -> ReportLayout:
        if self.total == 0:
            return ReportLayout.NO_ISSUES
        if not self._global_issues:
            return ReportLayout.ALL_INLINE
        if not self._has_inline_issue:
            return ReportLayout.ALL_GLOBAL
        return ReportLayout.MIXED

    def has_blocking_issues(self) -> bool:
        """True when the pull request should fail its quality gate."""
        return any(self._counts[s] > 0 for s in _BLOCKING_SEVERITIES)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> str:
        tool = self.options.tool_name
        layout = self.layout
        if layout is ReportLayout.NO_ISSUES:
            return f"{tool} analysis reported no issues."

        parts = [f"{tool} analysis reported {pluralize(self.total, 'issue')}\n"]
        parts.extend(self._severity_bullets())

        if layout in (ReportLayout.ALL_INLINE, ReportLayout.MIXED):
            parts.append(f"\n{_WATCH_COMMENTS}\n")
        if layout is ReportLayout.ALL_INLINE:
            return "".join(parts)

        if self.options.inline_comments_enabled:
            heading = self._extra_issues_heading(layout)
            if heading:
                parts.append(f"\n#### {heading}\n")
            parts.append(f"\n{_NOT_MODIFIED_NOTE}\n")
        elif self.is_truncated:
            top = pluralize(self.options.max_global_issues, "issue")
            parts.append(f"\n#### Top {top}\n")

        parts.append("\n")
        parts.extend(self._global_issue_lines())
        return "".join(parts)

    def _severity_bullets(self) -> list[str]:
        return [
            # Severity names stay singular: "17 major"
            f"* {severity_image_markdown(s)} {self._counts[s]} {s.value.lower()}\n"
            for s in Severity.display_order()
            if self._counts[s] > 0
        ]

    def _extra_issues_heading(self, layout: ReportLayout) -> str | None:
        # No inline issue: the note alone introduces the list unless it is cut short
        if layout is ReportLayout.ALL_GLOBAL and not self.is_truncated:
            return None
        extra = pluralize(self.displayed_global_issue_count, "extra issue")
        return f"Top {extra}" if self.is_truncated else extra

    def _global_issue_lines(self) -> list[str]:
        shown = self._global_issues[: self.options.max_global_issues]
        server = self.options.server_base_url
        # Every entry uses "1."; Markdown renderers number the list themselves
        return [f"1. {global_issue_markdown(issue, url, server)}\n" for issue, url in shown]
