"""Tests for sonar_pr_report/reports/markdown.py"""

import pytest

from sonar_pr_report.models import Issue, RuleKey, Severity
from sonar_pr_report.reports.markdown import (
    IMAGES_BASE_URL,
    global_issue_markdown,
    image_url,
    inline_issue_markdown,
    pluralize,
    rule_link_markdown,
    severity_image_markdown,
)

SERVER = "http://myserver"


def _issue(component="my:project:src/Foo.java") -> Issue:
    return Issue(component, Severity.MAJOR, RuleKey("squid", "S1234"), "Remove this")


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

def test_image_url():
    assert image_url("rule") == f"{IMAGES_BASE_URL}/rule.png"


@pytest.mark.parametrize("severity", list(Severity))
def test_severity_image_uses_lowercase_name(severity):
    md = severity_image_markdown(severity)
    assert md == f"![{severity.value}]({IMAGES_BASE_URL}/severity-{severity.value.lower()}.png)"


def test_rule_link_encodes_rule_key():
    md = rule_link_markdown(RuleKey("repo", "rule0"), SERVER)
    assert md == f"[![rule]({IMAGES_BASE_URL}/rule.png)](http://myserver/coding_rules#rule_key=repo%3Arule0)"


def test_rule_link_strips_trailing_slash():
    md = rule_link_markdown(RuleKey("repo", "rule0"), "http://myserver/sonar/")
    assert "(http://myserver/sonar/coding_rules#rule_key=repo%3Arule0)" in md


@pytest.mark.parametrize("count, expected", [
    (0, "0 issues"),
    (1, "1 issue"),
    (2, "2 issues"),
    (17, "17 issues"),
])
def test_pluralize(count, expected):
    assert pluralize(count, "issue") == expected


# ---------------------------------------------------------------------------
# Issue entries
# ---------------------------------------------------------------------------

def test_inline_issue_markdown():
    md = inline_issue_markdown(_issue(), SERVER)
    assert md.startswith(f"![MAJOR]({IMAGES_BASE_URL}/severity-major.png) Remove this [![rule]")
    assert md.endswith("rule_key=squid%3AS1234)")


def test_global_issue_with_file_url_links_last_segment():
    url = "https://bitbucket.org/Owner/Repo/src/abc123/src/Foo.java#Foo.java-12"
    md = global_issue_markdown(_issue(), url, SERVER)
    assert f" [Foo.java#Foo.java-12]({url}): Remove this " in md


def test_global_issue_without_file_url_prints_component_key():
    md = global_issue_markdown(_issue(component="my:project"), None, SERVER)
    assert " my:project: Remove this " in md
    assert "](http" in md  # only the severity icon and rule link remain
    assert "[my:project]" not in md
