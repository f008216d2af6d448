"""Markdown formatting primitives used by the pull request comments.

Functions:
    image_url(name)                                      -> str
    severity_image_markdown(severity)                    -> str
    rule_link_markdown(rule_key, server_base_url)        -> str
    pluralize(count, noun)                               -> str
    inline_issue_markdown(issue, server_base_url)        -> str
    global_issue_markdown(issue, file_url, server_base_url) -> str
"""

from urllib.parse import quote_plus

from sonar_pr_report.models import Issue, RuleKey, Severity

IMAGES_BASE_URL = "https://raw.bitbucketusercontent.com/SonarCommunity/sonar-bitbucket/master/images"


def image_url(name: str) -> str:
    return f"{IMAGES_BASE_URL}/{name}.png"


def severity_image_markdown(severity: Severity) -> str:
    """``![MAJOR](.../severity-major.png)``"""
    return f"![{severity.value}]({image_url('severity-' + severity.value.lower())})"


def rule_link_markdown(rule_key: RuleKey, server_base_url: str) -> str:
    """Rule icon linking to the rule description on the SonarQube server."""
    # Form-encoded: "repo:rule" -> "repo%3Arule"
    encoded = quote_plus(str(rule_key))
    url = f"{server_base_url.rstrip('/')}/coding_rules#rule_key={encoded}"
    return f"[![rule]({image_url('rule')})]({url})"


def pluralize(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def inline_issue_markdown(issue: Issue, server_base_url: str) -> str:
    """Body of a comment attached to the issue's line."""
    return (
        f"{severity_image_markdown(issue.severity)} {issue.message} "
        f"{rule_link_markdown(issue.rule_key, server_base_url)}"
    )


def global_issue_markdown(issue: Issue, file_url: str | None, server_base_url: str) -> str:
    """One entry of the summary list, without its ordinal marker.

    With a file URL the entry links to it, labelled by the URL's last path
    segment (e.g. ``File.java#L12``). Without one, the raw component key is
    printed instead.
    """
    if file_url:
        label = file_url.rstrip("/").rsplit("/", 1)[-1]
        location = f"[{label}]({file_url})"
    else:
        location = issue.component_key
    return (
        f"{severity_image_markdown(issue.severity)} {location}: {issue.message} "
        f"{rule_link_markdown(issue.rule_key, server_base_url)}"
    )
