"""Configuration loading.

Usage:
    config = load("sonar-pr-report.yaml")     # raises ConfigurationError on bad config
    repo = config.repository()                # e.g. "SonarCommunity/sonar-bitbucket"
    options = config.report_options()         # ReportOptions for GlobalReport
    generate_template("sonar-pr-report.yaml") # writes example file to disk

The file holds the analysis properties under a ``properties`` mapping, keyed
by their usual SonarQube names (``sonar.bitbucket.repository``, ...).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from sonar_pr_report.reports.summary import DEFAULT_MAX_GLOBAL_ISSUES, ReportOptions
from sonar_pr_report.repository import (
    DISABLE_INLINE_PROPERTY,
    ENDPOINT_PROPERTY,
    MAX_GLOBAL_ISSUES_PROPERTY,
    OAUTH_PROPERTY,
    PULL_REQUEST_PROPERTY,
    REPOSITORY_PROPERTY,
    SCM_DEV_LINK_PROPERTY,
    SCM_LINK_PROPERTY,
    ConfigurationError,
    resolve_endpoint,
    resolve_inline_comments_allowed,
    resolve_pull_request_id,
    resolve_repository,
)

HOST_URL_PROPERTY = "sonar.host.url"
SERVER_BASE_URL_PROPERTY = "sonar.core.serverBaseUrl"
DEFAULT_SERVER_BASE_URL = "http://localhost:9000"

# Environment variable -> property it overrides
ENV_OVERRIDES = {
    "SONAR_BITBUCKET_OAUTH":        OAUTH_PROPERTY,
    "SONAR_BITBUCKET_PULL_REQUEST": PULL_REQUEST_PROPERTY,
    "SONAR_HOST_URL":               HOST_URL_PROPERTY,
}


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    properties: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        value = self.properties.get(key)
        if value is None or not value.strip():
            return None
        return value.strip()

    def repository(self) -> str:
        return resolve_repository(
            self.get(REPOSITORY_PROPERTY),
            self.get(SCM_DEV_LINK_PROPERTY),
            self.get(SCM_LINK_PROPERTY),
        )

    def pull_request_number(self) -> int | None:
        try:
            return resolve_pull_request_id(self.get(PULL_REQUEST_PROPERTY))
        except ValueError as exc:
            raise ConfigurationError(
                f"'{PULL_REQUEST_PROPERTY}' must be an integer, got '{self.get(PULL_REQUEST_PROPERTY)}'"
            ) from exc

    def is_enabled(self) -> bool:
        """Reporting only happens for pull request analyses."""
        return self.pull_request_number() is not None

    def endpoint(self) -> str:
        return resolve_endpoint(self.get(ENDPOINT_PROPERTY))

    def oauth(self) -> str | None:
        return self.get(OAUTH_PROPERTY)

    def inline_comments_allowed(self) -> bool:
        return resolve_inline_comments_allowed(self.get(DISABLE_INLINE_PROPERTY))

    def max_global_issues(self) -> int:
        raw = self.get(MAX_GLOBAL_ISSUES_PROPERTY)
        if raw is None:
            return DEFAULT_MAX_GLOBAL_ISSUES
        try:
            value = int(raw)
        except ValueError:
            value = 0
        if value < 1:
            raise ConfigurationError(
                f"'{MAX_GLOBAL_ISSUES_PROPERTY}' must be a positive integer, got '{raw}'"
            )
        return value

    def server_base_url(self) -> str:
        return (
            self.get(SERVER_BASE_URL_PROPERTY)
            or self.get(HOST_URL_PROPERTY)
            or DEFAULT_SERVER_BASE_URL
        )

    def report_options(self) -> ReportOptions:
        return ReportOptions(
            server_base_url=self.server_base_url(),
            inline_comments_enabled=self.inline_comments_allowed(),
            max_global_issues=self.max_global_issues(),
        )


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = "sonar-pr-report.yaml") -> Config:
    """Load configuration from a YAML file.

    Environment variables listed in ENV_OVERRIDES take precedence over the
    file values.

    Raises:
        ConfigurationError: if the file is missing or malformed.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigurationError(
            f"Config file not found: '{config_path}'\n"
            "Run `python -m sonar_pr_report init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse '{config_path}': {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"'{config_path}' must be a YAML mapping at the top level.")

    section = raw.get("properties") or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'properties' in '{config_path}' must be a mapping.")

    return from_properties(section, environ=os.environ)


def from_properties(properties: dict, environ: dict[str, str] | None = None) -> Config:
    """Build a Config from raw property values, applying env overrides."""
    values = {str(k): _to_str(v) for k, v in properties.items() if v is not None}
    for env_name, key in ENV_OVERRIDES.items():
        if environ and environ.get(env_name):
            values[key] = environ[env_name]
    return Config(properties=values)


def _to_str(value) -> str:
    # YAML booleans would otherwise come back as "True" / "False"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
properties:
  sonar.host.url: "https://sonar.example.com"

  # Either set the repository explicitly ("Owner/Repo" or its https clone URL)
  # or let it be guessed from the SCM links below.
  sonar.bitbucket.repository: "SonarCommunity/sonar-bitbucket"
  # sonar.links.scm_dev: "scm:git:git@bitbucket.org:SonarCommunity/sonar-bitbucket.git"
  # sonar.links.scm: "scm:git:git@bitbucket.org:SonarCommunity/sonar-bitbucket.git"

  sonar.bitbucket.pullRequest: 1                 # or SONAR_BITBUCKET_PULL_REQUEST
  sonar.bitbucket.endpoint: "https://api.bitbucket.com"
  sonar.bitbucket.disableInlineComments: false
  sonar.bitbucket.maxGlobalIssues: 100
"""


def generate_template(output_path: str = "sonar-pr-report.yaml") -> None:
    """Write a template configuration file to *output_path*.

    Raises:
        ConfigurationError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigurationError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
