"""CLI entry point: command definitions using Click.

Commands:
    init          Generate a template config file
    repository    Show the resolved repository and pull request
    render        Render the pull request summary comment from an issues file
"""

import json
import sys

import click

from sonar_pr_report import __version__

EXIT_BLOCKING = 2


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _load_config(ctx: click.Context):
    """Load the config file. Exits on error."""
    from sonar_pr_report.config import load
    from sonar_pr_report.repository import ConfigurationError

    obj = ctx.obj
    try:
        config = load(obj["config_path"])
    except ConfigurationError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    if obj["verbose"]:
        click.echo(f"[verbose] Loaded configuration from '{obj['config_path']}'", err=True)

    return config


def _emit(text: str, ctx: click.Context) -> None:
    """Write text to stdout or to the file specified by --output."""
    output_path: str | None = ctx.obj["output_path"]
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Report written to '{output_path}'", err=True)
    else:
        click.echo(text)


def _handle_config_errors(func):
    """Decorator that catches configuration errors and exits cleanly."""
    import functools

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from sonar_pr_report.repository import ConfigurationError

        try:
            return func(*args, **kwargs)
        except ConfigurationError as exc:
            click.echo(f"Configuration error: {exc}", err=True)
            sys.exit(1)

    return wrapper


def _read_issues(issues_path: str) -> list[dict]:
    try:
        with open(issues_path, encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as exc:
        # JSONDecodeError and UnicodeDecodeError
        raise click.ClickException(f"Failed to parse '{issues_path}': {exc}") from exc

    issues = data.get("issues") if isinstance(data, dict) else data
    if not isinstance(issues, list):
        raise click.ClickException(f"'{issues_path}' must contain an 'issues' array.")
    return issues


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default="sonar-pr-report.yaml", show_default=True,
              help="Path to the configuration file.")
@click.option("--output", "output_path", default=None,
              help="Write the output to a file instead of stdout.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="sonar-pr-report")
@click.pass_context
def cli(ctx: click.Context, config_path: str, output_path: str | None, verbose: bool) -> None:
    """SonarQube pull request reports: render the summary comment as Markdown."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["output_path"] = output_path
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="sonar-pr-report.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template sonar-pr-report.yaml file."""
    from sonar_pr_report.config import generate_template
    from sonar_pr_report.repository import ConfigurationError

    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your server URL, repository and pull request.")
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# repository
# ---------------------------------------------------------------------------

@cli.command("repository")
@click.pass_context
@_handle_config_errors
def repository_command(ctx: click.Context) -> None:
    """Show the Bitbucket repository and pull request resolved from the config."""
    config = _load_config(ctx)
    pr = config.pull_request_number()

    lines = [
        f"repository: {config.repository()}",
        f"pull request: {pr if pr is not None else '(none, reporting disabled)'}",
        f"endpoint: {config.endpoint()}",
        f"inline comments: {'enabled' if config.inline_comments_allowed() else 'disabled'}",
    ]
    _emit("\n".join(lines), ctx)


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------

@cli.command("render")
@click.argument("issues_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--fail-on-blocking", is_flag=True, default=False,
              help=f"Exit with status {EXIT_BLOCKING} when blocker or critical issues are reported.")
@click.pass_context
@_handle_config_errors
def render_command(ctx: click.Context, issues_path: str, fail_on_blocking: bool) -> None:
    """Render the summary comment for the issues listed in ISSUES_PATH.

    ISSUES_PATH is a JSON document with an ``issues`` array, as returned by
    /api/issues/search. Each entry may add ``inline`` (the issue is on a
    changed line) and ``fileUrl`` (link to the file on Bitbucket).
    """
    from sonar_pr_report.models import Issue, Placement
    from sonar_pr_report.reports.summary import GlobalReport

    config = _load_config(ctx)
    verbose = ctx.obj["verbose"]

    # Fails early when the target repository cannot be known
    repository = config.repository()
    if verbose:
        click.echo(f"[verbose] Rendering report for {repository}", err=True)

    report = GlobalReport(config.report_options())
    for raw in _read_issues(issues_path):
        try:
            issue = Issue.from_dict(raw)
            placement = Placement.from_dict(raw)
        except (ValueError, TypeError, AttributeError) as exc:
            click.echo(f"Invalid issue data: {exc}", err=True)
            sys.exit(1)
        counted = report.process(issue, placement.file_url, placement.can_be_inline)
        if verbose and not counted:
            click.echo(f"[verbose] Skipping pre-existing issue on {issue.component_key}", err=True)

    if verbose and report.is_truncated:
        hidden = report.global_issue_count - report.displayed_global_issue_count
        click.echo(f"[verbose] {hidden} issue(s) left out of the summary list", err=True)

    _emit(report.render(), ctx)

    if fail_on_blocking and report.has_blocking_issues():
        sys.exit(EXIT_BLOCKING)
