"""Resolution of the Bitbucket repository and pull request context.

Usage:
    repo = resolve_repository(None, None, "scm:git:git@bitbucket.org:Owner/Repo.git")
    # -> "Owner/Repo"
    pr   = resolve_pull_request_id("42")                  # -> 42
    url  = resolve_endpoint(None)                         # -> DEFAULT_ENDPOINT
    ok   = resolve_inline_comments_allowed("false")       # -> True

Every function here is pure: no I/O, no environment lookups.
"""

import re

# Analysis property names, used in error messages and by the config loader
REPOSITORY_PROPERTY = "sonar.bitbucket.repository"
PULL_REQUEST_PROPERTY = "sonar.bitbucket.pullRequest"
ENDPOINT_PROPERTY = "sonar.bitbucket.endpoint"
OAUTH_PROPERTY = "sonar.bitbucket.oauth"
DISABLE_INLINE_PROPERTY = "sonar.bitbucket.disableInlineComments"
MAX_GLOBAL_ISSUES_PROPERTY = "sonar.bitbucket.maxGlobalIssues"
SCM_DEV_LINK_PROPERTY = "sonar.links.scm_dev"
SCM_LINK_PROPERTY = "sonar.links.scm"

DEFAULT_ENDPOINT = "https://api.bitbucket.com"

_HTTP_URL = re.compile(r"^https?://", re.IGNORECASE)

# scm:git:git@host:Owner/Repo.git  and  scm:git:ssh://git@host/Owner/Repo.git
_SCM_URL = re.compile(
    r"^scm:git:(?:ssh://)?git@[^:/]+[:/](?P<repo>[^/]+/[^/]+?)(?:\.git)?/?$"
)

_TRUE_VALUES = ("true", "1", "yes", "on")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigurationError(Exception):
    """Raised when the analysis configuration cannot be used."""


class RepositoryNotConfiguredError(ConfigurationError):
    """Raised when no repository property nor SCM link is set."""


class RepositoryParseError(ConfigurationError):
    """Raised when the repository property or SCM links cannot be parsed."""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def resolve_repository(
    explicit_repo: str | None,
    scm_dev_url: str | None,
    scm_url: str | None,
) -> str:
    """Return the canonical ``owner/repo`` identifier.

    The explicit repository property always wins. It may be given either as
    ``owner/repo`` or as an http(s) clone URL, in which case the scheme and
    ``.git`` suffix are dropped and the last two path segments are kept.

    Without it, the developer SCM link is tried before the public one; both
    are expected in the ``scm:git:git@<host>:<owner>/<repo>.git`` form.

    Raises:
        RepositoryNotConfiguredError: nothing to resolve from.
        RepositoryParseError:         explicit http(s) URL without owner and
                                      repository, or SCM links present but
                                      unparsable.
    """
    if not _is_blank(explicit_repo):
        return _repository_from_property(explicit_repo.strip())

    if _is_blank(scm_dev_url) and _is_blank(scm_url):
        raise RepositoryNotConfiguredError(
            "Unable to determine Bitbucket repository name for this project. "
            f"Please provide it using property '{REPOSITORY_PROPERTY}' "
            f"or configure property '{SCM_LINK_PROPERTY}'."
        )

    for candidate in (scm_dev_url, scm_url):
        if _is_blank(candidate):
            continue
        match = _SCM_URL.match(candidate.strip())
        if match:
            return match.group("repo")

    raise RepositoryParseError(
        "Unable to parse Bitbucket repository name for this project. "
        "Please check configuration:\n"
        f"  * {SCM_DEV_LINK_PROPERTY}: {scm_dev_url}\n"
        f"  * {SCM_LINK_PROPERTY}: {scm_url}"
    )


def resolve_pull_request_id(raw: str | int | None) -> int | None:
    """Return the pull request number, or None when this is not a PR analysis."""
    if raw is None or isinstance(raw, str) and not raw.strip():
        return None
    return int(raw)


def resolve_endpoint(raw: str | None, default: str = DEFAULT_ENDPOINT) -> str:
    return default if _is_blank(raw) else raw


def resolve_inline_comments_allowed(disable_flag: str | bool | None) -> bool:
    """Inline comments are allowed unless explicitly disabled."""
    if disable_flag is None:
        return True
    if isinstance(disable_flag, bool):
        return not disable_flag
    return str(disable_flag).strip().lower() not in _TRUE_VALUES


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _repository_from_property(value: str) -> str:
    if not _HTTP_URL.match(value):
        return value

    path = _HTTP_URL.sub("", value).rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    segments = [s for s in path.split("/") if s]
    # First segment is the host
    if len(segments) < 3:
        raise RepositoryParseError(
            "Unable to parse Bitbucket repository name for this project. "
            f"Expected an owner and a repository in '{REPOSITORY_PROPERTY}': {value}"
        )
    return "/".join(segments[-2:])
