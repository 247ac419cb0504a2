"""
Command-line interface for tune-my-repos.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from tune_my_repos.auth import OAuthSession, mask_token
from tune_my_repos.batch import BatchResult, analyze_all, summarize_batch
from tune_my_repos.cache import (
    clear_cache,
    clear_expired_cache,
    get_cache_stats,
    get_cached_results,
    list_cached,
    save_results,
)
from tune_my_repos.config import (
    is_cache_enabled,
    is_verbose_enabled,
    load_priority_config,
    set_cache_dir,
    set_cache_ttl,
    set_verbose,
    set_verify_ssl,
)
from tune_my_repos.core import RepositoryAnalyzer
from tune_my_repos.errors import TuneMyReposError, remediation_hint
from tune_my_repos.export import EXPORTERS, get_action_link
from tune_my_repos.github import GitHubClient
from tune_my_repos.http_client import close_http_client
from tune_my_repos.models import (
    AnalysisResult,
    AnalysisStats,
    MaturityLevel,
    PriorityConfig,
    RepositoryIdentity,
    Severity,
    SortStrategy,
    count_by_severity,
)
from tune_my_repos.prioritizer import sort_findings, top_findings

app = typer.Typer(help="Analyze GitHub repositories against a governance rubric.")
console = Console()

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.IMPORTANT: "yellow",
    Severity.RECOMMENDED: "cyan",
    Severity.OPTIONAL: "dim",
}

MATURITY_STYLES = {
    MaturityLevel.LOW: "red",
    MaturityLevel.MEDIUM: "yellow",
    MaturityLevel.HIGH: "green",
}

OUTPUT_FORMATS = ("table", *EXPORTERS)


# --- Helper Functions ---


def _fail(error: Exception) -> None:
    """Print a user-visible failure with its remediation hint and exit 1."""
    console.print(f"[red]❌ {error}[/red]")
    hint = remediation_hint(error)
    if hint:
        console.print(f"[dim]💡 {hint}[/dim]")
    raise typer.Exit(code=1)


def run_oauth_login(session: OAuthSession, open_browser: bool = True) -> None:
    """Interactive OAuth flow: print the authorize URL, read back the redirect URL."""
    url = session.login()
    console.print("🔐 Open this URL to authorize tune-my-repos:")
    console.print(f"   [link={url}]{url}[/link]")
    if open_browser and typer.confirm("Open it in your browser?", default=True):
        typer.launch(url)
    redirected = typer.prompt("Paste the URL GitHub redirected you to")
    session.handle_callback_url(redirected)


def _format_counts(result: AnalysisResult) -> str:
    counts = count_by_severity(result.findings)
    return " / ".join(
        f"[{SEVERITY_STYLES[severity]}]{counts[severity.value]}[/{SEVERITY_STYLES[severity]}]"
        for severity in Severity
    )


def display_results(
    results: list[AnalysisResult], priorities: PriorityConfig | None = None
):
    """Display the analysis results in a rich table."""
    table = Table(title="tune-my-repos Report")
    table.add_column("Repository", justify="left", style="cyan", no_wrap=True)
    table.add_column("Type", justify="left")
    table.add_column("Maturity", justify="center")
    table.add_column("C / I / R / O", justify="center")
    table.add_column("Top Findings", justify="left")

    for result in results:
        maturity = result.maturity_level
        style = MATURITY_STYLES[maturity]
        top = top_findings(result.findings, priorities)
        top_text = " • ".join(f.title for f in top) if top else "No findings"
        repository = result.repository.full_name
        if result.fork.is_fork:
            repository += " [dim](fork)[/dim]"

        table.add_row(
            repository,
            result.classification.value,
            f"[{style}]{maturity.value}[/{style}]",
            _format_counts(result),
            top_text,
        )

    console.print(table)


def display_results_detailed(
    results: list[AnalysisResult], priorities: PriorityConfig | None = None
):
    """Display every finding, limitation and action link per repository."""
    for result in results:
        repository = result.repository.full_name
        style = MATURITY_STYLES[result.maturity_level]
        console.print(f"\n📦 [bold cyan]{repository}[/bold cyan]")
        console.print(
            f"   Type: {result.classification.value} | "
            f"Maturity: [{style}]{result.maturity_level.value}[/{style}] | "
            f"Files: {result.file_count}"
        )
        if result.fork.upstream_full_name:
            console.print(f"   Fork of: {result.fork.upstream_full_name}")

        if result.findings:
            findings_table = Table(show_header=True, header_style="bold magenta")
            findings_table.add_column("Severity", no_wrap=True)
            findings_table.add_column("Finding", style="cyan")
            findings_table.add_column("Recommendation")
            findings_table.add_column("Effort", no_wrap=True)

            for finding in sort_findings(result.findings, priorities):
                severity_style = SEVERITY_STYLES[finding.severity]
                findings_table.add_row(
                    f"[{severity_style}]{finding.severity.value}[/{severity_style}]",
                    finding.title,
                    finding.recommendation,
                    finding.time_estimate,
                )
            console.print(findings_table)

            for finding in result.findings:
                action = get_action_link(finding, repository)
                if action is not None and action.url:
                    console.print(
                        f"   • {finding.title}: [link={action.url}]{action.label}[/link]"
                    )
        else:
            console.print("   [green]No findings ✓[/green]")

        for note in result.limitations:
            console.print(f"   [dim]ℹ️  {note}[/dim]")


def display_summary(results: list[AnalysisResult], stats: AnalysisStats | None):
    summary = summarize_batch(results)
    style = MATURITY_STYLES[summary.overall_maturity]
    console.print(
        f"\n📊 Overall maturity: [{style}]{summary.overall_maturity.value}[/{style}] "
        f"across {summary.total_repositories} repositories "
        f"({summary.critical} critical, {summary.important} important findings)"
    )
    if stats is not None and stats.failed:
        console.print(
            f"[yellow]⚠️  {stats.failed} of {stats.total} analyses failed.[/yellow]"
        )


def _analyze_single(
    analyzer: RepositoryAnalyzer, identity: RepositoryIdentity
) -> BatchResult:
    with console.status(f"Analyzing [bold cyan]{identity.full_name}[/bold cyan]...") as status:
        result = analyzer.analyze(identity, on_progress=status.update)
    return BatchResult(results=[result], stats=AnalysisStats(1, 0, 1))


def _analyze_batch(client: GitHubClient, login: str, skip_forks: bool) -> BatchResult:
    console.print(f"🔍 Fetching repositories for [bold]{login}[/bold]...")
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task_id = None

        def on_progress(index: int, total: int, full_name: str) -> None:
            nonlocal task_id
            if task_id is None:
                task_id = progress.add_task("Analyzing", total=total)
            progress.update(
                task_id, completed=index - 1, description=f"Analyzing {full_name}"
            )

        batch = analyze_all(
            login,
            skip_forks=skip_forks,
            client=client,
            analyzer=RepositoryAnalyzer(client),
            on_progress=on_progress,
        )

    for message in batch.messages:
        console.print(f"[cyan]ℹ️  {message}[/cyan]")
    return batch


def _write_output(text: str, output: Path | None) -> None:
    if output is None:
        typer.echo(text)
        return
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]✨ Report written to {output}[/green]")


# --- Commands ---


@app.command()
def analyze(
    target: str = typer.Argument(
        ...,
        help="GitHub user or organization (batch), or 'owner/repo' (single repository).",
    ),
    skip_forks: bool = typer.Option(
        False,
        "--skip-forks",
        help="Leave out forked repositories in batch mode.",
    ),
    token: str | None = typer.Option(
        None,
        "--token",
        help="GitHub token (default: GITHUB_TOKEN environment variable or .env).",
    ),
    oauth: bool = typer.Option(
        False,
        "--oauth",
        help="Authenticate through the GitHub OAuth flow before analyzing.",
    ),
    output_format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, json, markdown or csv.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the report to a file instead of stdout (json, markdown, csv).",
    ),
    top: int | None = typer.Option(
        None,
        "--top",
        help="Number of headline findings per repository (default: 3).",
    ),
    sort_strategy: SortStrategy | None = typer.Option(
        None,
        "--sort-strategy",
        help="Finding order: 'severity' or 'priority' (uses the priority table).",
    ),
    priority_file: Path | None = typer.Option(
        None,
        "--priority-file",
        help="TOML file with finding priorities (default: [tool.tune-my-repos.priorities]).",
    ),
    no_cache: bool = typer.Option(
        False,
        "--no-cache",
        help="Disable cache and fetch fresh data.",
    ),
    cache_dir: Path | None = typer.Option(
        None,
        "--cache-dir",
        help="Cache directory path (default: ~/.cache/tune-my-repos).",
    ),
    cache_ttl: int | None = typer.Option(
        None,
        "--cache-ttl",
        help="Cache TTL in seconds (default: 3600 = 1 hour).",
    ),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Disable SSL certificate verification for HTTPS requests.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Display every finding, limitation and diagnostic.",
    ),
):
    """Analyze the repositories of a user or organization, or a single repository."""
    if output_format not in OUTPUT_FORMATS:
        console.print(
            f"[yellow]⚠️  Unknown format '{output_format}'. "
            f"Choose one of: {', '.join(OUTPUT_FORMATS)}[/yellow]"
        )
        raise typer.Exit(code=1)

    if insecure:
        set_verify_ssl(False)
    if verbose:
        set_verbose(True)
    if cache_dir:
        set_cache_dir(cache_dir)
    if cache_ttl:
        set_cache_ttl(cache_ttl)

    try:
        priorities = load_priority_config(priority_file)
    except (TuneMyReposError, ValueError) as e:
        _fail(e)
    if top is not None:
        priorities = (priorities or PriorityConfig())._replace(top_count=top)
    if sort_strategy is not None:
        priorities = (priorities or PriorityConfig())._replace(
            sort_strategy=sort_strategy
        )

    session = None
    if oauth:
        session = OAuthSession()
        try:
            run_oauth_login(session)
        except TuneMyReposError as e:
            _fail(e)

    client = GitHubClient(token=token, session=session)
    if is_verbose_enabled():
        console.print(f"[dim]Token status: {mask_token(client.current_token)}[/dim]")
    if not client.current_token:
        console.print(
            "[yellow]⚠️  No GitHub token configured: unauthenticated requests are "
            "limited to 60 requests/hour. Set GITHUB_TOKEN for 5,000 requests/hour.[/yellow]"
        )

    use_cache = not no_cache and is_cache_enabled()
    batch = None
    if use_cache:
        cached = get_cached_results(target, skip_forks)
        if cached is not None:
            console.print(
                f"  -> Found [bold green]{target}[/bold green] in cache "
                f"({round(cached.age_seconds / 60)} minutes old)."
            )
            batch = BatchResult(
                results=cached.results,
                stats=cached.stats or AnalysisStats(len(cached.results), 0, len(cached.results)),
            )

    if batch is None:
        try:
            if "/" in target:
                identity = RepositoryIdentity.parse(target)
                batch = _analyze_single(RepositoryAnalyzer(client), identity)
            else:
                batch = _analyze_batch(client, target.strip(), skip_forks)
        except ValueError as e:
            console.print(f"[yellow]⚠️  {e}[/yellow]")
            raise typer.Exit(code=1) from None
        except TuneMyReposError as e:
            _fail(e)
        finally:
            close_http_client()

        if use_cache and batch.results:
            save_results(target, skip_forks, batch.results, batch.stats)

    results = batch.results
    if not results:
        console.print("No results to display.")
        return

    if output_format == "table":
        if is_verbose_enabled():
            display_results_detailed(results, priorities)
        display_results(results, priorities)
        if len(results) > 1:
            display_summary(results, batch.stats)
        return

    _write_output(EXPORTERS[output_format](results), output)


@app.command()
def login(
    no_browser: bool = typer.Option(
        False,
        "--no-browser",
        help="Only print the authorization URL; do not open a browser.",
    ),
):
    """Authenticate with GitHub OAuth and show the authenticated identity."""
    session = OAuthSession()
    try:
        run_oauth_login(session, open_browser=not no_browser)
    except TuneMyReposError as e:
        _fail(e)

    user = session.get_user_info()
    if user is None:
        console.print("[yellow]⚠️  Could not look up the authenticated user.[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Logged in as [bold]{user.get('login', 'unknown')}[/bold][/green]")


@app.command()
def cache_stats():
    """Display cache statistics."""
    stats = get_cache_stats()

    if not stats["exists"]:
        console.print(
            f"[yellow]Cache directory does not exist: {stats['cache_dir']}[/yellow]"
        )
        return

    console.print("[bold cyan]Cache Statistics[/bold cyan]")
    console.print(f"  Directory: {stats['cache_dir']}")
    console.print(f"  Entries: {stats['size']}")
    console.print(f"  Valid entries: [green]{stats['valid_entries']}[/green]")
    console.print(f"  Expired entries: [yellow]{stats['expired_entries']}[/yellow]")
    console.print(f"  Hits: {stats['hits']}  Sets: {stats['sets']}")

    entries = list_cached()
    if entries:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Target", style="cyan")
        table.add_column("Skip forks", justify="center")
        table.add_column("Repositories", justify="right")
        table.add_column("Fetched at")
        table.add_column("Valid", justify="center")

        for entry in entries:
            table.add_row(
                entry["target"],
                "yes" if entry["skip_forks"] else "no",
                str(entry["repositories"]),
                entry["fetched_at"],
                "[green]✓[/green]" if entry["is_valid"] else "[yellow]expired[/yellow]",
            )
        console.print(table)


@app.command("clear-cache")
def clear_cache_command(
    expired_only: bool = typer.Option(
        False,
        "--expired-only",
        help="Only remove expired entries.",
    ),
):
    """Clear cached analysis results."""
    if expired_only:
        cleared = clear_expired_cache()
        console.print(f"[green]✨ Cleared {cleared} expired cache entries.[/green]")
    else:
        cleared = clear_cache()
        console.print(f"[green]✨ Cleared {cleared} cache entries.[/green]")


if __name__ == "__main__":
    app()
