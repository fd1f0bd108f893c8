"""CLI for the Dometrics scoring engine.

Commands:
- score: Score one domain (table or --json, optional external valuation)
- score-file: Score a CSV of domains into scored and explainability CSVs
- search: Score a CSV and filter it with a natural-language query
- track / untrack: Manage the tracked-domain store
- alerts: Report new offers on tracked domains
- export-weights: Write the active weights document as JSON
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Protocol

import typer
from rich import print as rprint
from rich.table import Table

from .application.score_domains import rank_by_forecast, run_score_domains, score_frame
from .application.tracking import load_tracked_domains, run_offer_alerts, save_tracked_domains
from .application.weights import weights_to_document
from .config import EngineConfig
from .domain.analysis import analyze
from .domain.engine import ScoringEngine
from .domain.models import DomainScores
from .domain.search import apply_filters, explain_filters, parse_query
from .domain.tracking import is_tracked, track, untrack
from .exceptions import InvalidDomainRecord, InvalidTimestamp
from .io_validation import parse_domain_record, parse_timestamp
from .protocols import FileSystem, ProgressReporter, ValuationService


class DependenciesBuilder(Protocol):
    """Protocol for constructing CLI dependencies."""

    def __call__(self, *, config: EngineConfig) -> CliDependencies:
        """Build dependencies for CLI commands."""
        ...


@dataclass(frozen=True)
class CliDependencies:
    """Concrete dependencies required by the CLI."""

    fs: FileSystem
    engine: ScoringEngine
    valuation_service: ValuationService | None
    progress: ProgressReporter | None = None


@dataclass(frozen=True)
class CliContext:
    """Runtime CLI context for a single command invocation."""

    config: EngineConfig
    deps_builder: DependenciesBuilder

    def build_dependencies(self, *, config: EngineConfig | None = None) -> CliDependencies:
        """Return dependencies using the configured builder."""
        return self.deps_builder(config=config or self.config)


class CliContextNotInitialisedError(typer.BadParameter):
    """Raised when CLI context is missing."""

    def __init__(self) -> None:
        super().__init__("CLI context is not initialised. Use the dometrics entry point.")


class ValuationNotConfiguredError(typer.BadParameter):
    """Raised when --use-valuation is given without an API key."""

    def __init__(self) -> None:
        super().__init__("--use-valuation requires VALUATION_API_KEY to be set.")


DEFAULT_INPUT = Path("data/raw/domains.csv")
DEFAULT_PROCESSED_DIR = Path("data/processed")
DEFAULT_OFFERS_IN = Path("data/raw/offer_counts.csv")
DEFAULT_WEIGHTS_OUT = Path("data/reference/scoring_weights.json")
DIMENSIONS = ("risk", "rarity", "momentum", "forecast")

NowOption = Annotated[
    str | None,
    typer.Option("--now", help="Scoring instant as ISO 8601 (default: current UTC time)"),
]


def _get_context(ctx: typer.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        raise CliContextNotInitialisedError()
    return ctx.obj


def _resolve_now(now: str | None) -> datetime:
    if now is None:
        return datetime.now(UTC)
    try:
        return parse_timestamp(now, "--now")
    except InvalidTimestamp as exc:
        raise typer.BadParameter(str(exc), param_hint="--now") from exc


def _scores_table(full_name: str, scores: DomainScores) -> Table:
    table = Table(title=f"{full_name} (weights {scores.weights_version})")
    table.add_column("Dimension")
    table.add_column("Score", justify="right")
    table.add_column("Top factors")
    for dimension in DIMENSIONS:
        factors = getattr(scores.explainers, dimension)
        table.add_row(
            dimension,
            str(getattr(scores, dimension)),
            ", ".join(f"{factor.name} ({factor.contribution:+.1f})" for factor in factors),
        )
    table.add_row(
        "value",
        f"{scores.current_value:,.2f} -> {scores.projected_value:,.2f}",
        ", ".join(factor.name for factor in scores.explainers.value),
    )
    return table


def create_app(deps_builder: DependenciesBuilder) -> typer.Typer:
    """Create a Typer app wired with the provided dependencies builder."""
    app = typer.Typer(
        add_completion=False,
        help="Dometrics: explainable risk, rarity, momentum and value scores for domain names",
    )

    @app.callback()
    def main(ctx: typer.Context) -> None:
        """Initialise CLI context."""
        ctx.obj = CliContext(config=EngineConfig.from_env(), deps_builder=deps_builder)

    @app.command()
    def score(
        ctx: typer.Context,
        domain: Annotated[str, typer.Argument(help="Domain to score, e.g. ab.com")],
        expires_at: Annotated[
            str,
            typer.Option("--expires-at", "-e", help="Expiry timestamp (ISO 8601)"),
        ],
        tld: Annotated[
            str | None,
            typer.Option("--tld", help="TLD when DOMAIN has no dot"),
        ] = None,
        locked: Annotated[
            bool,
            typer.Option("--locked/--unlocked", help="Transfer lock status"),
        ] = False,
        registrar_id: Annotated[int, typer.Option("--registrar-id")] = 0,
        registrar_name: Annotated[str, typer.Option("--registrar-name")] = "",
        renewals: Annotated[int, typer.Option("--renewals")] = 0,
        offers: Annotated[int, typer.Option("--offers")] = 0,
        activity_7d: Annotated[int, typer.Option("--activity-7d")] = 0,
        activity_30d: Annotated[int, typer.Option("--activity-30d")] = 0,
        tokenized_at: Annotated[
            str | None,
            typer.Option("--tokenized-at", help="Tokenization timestamp (ISO 8601)"),
        ] = None,
        as_json: Annotated[
            bool,
            typer.Option("--json", help="Print the full score document as JSON"),
        ] = False,
        use_valuation: Annotated[
            bool,
            typer.Option("--use-valuation", help="Ask the external valuation service first"),
        ] = False,
        now: NowOption = None,
    ) -> None:
        """Score one domain and print its scores, explainers and outlook."""
        state = _get_context(ctx)
        config = state.config.with_overrides(use_valuation=True) if use_valuation else state.config
        if use_valuation and not config.valuation_enabled:
            raise ValuationNotConfiguredError()
        current = _resolve_now(now)
        try:
            description = parse_domain_record(
                {
                    "name": domain,
                    "tld": tld,
                    "expires_at": expires_at,
                    "lock_status": locked,
                    "registrar_id": registrar_id,
                    "registrar_name": registrar_name,
                    "renewal_count": renewals,
                    "offer_count": offers,
                    "activity_7d": activity_7d,
                    "activity_30d": activity_30d,
                    "tokenized_at": tokenized_at,
                }
            )
        except (InvalidDomainRecord, InvalidTimestamp) as exc:
            raise typer.BadParameter(str(exc)) from exc

        deps = state.build_dependencies(config=config)
        if config.valuation_enabled and deps.valuation_service is not None:
            scores = asyncio.run(
                deps.engine.score_async(
                    description,
                    deps.valuation_service,
                    now=current,
                    timeout_seconds=config.valuation_timeout_seconds,
                )
            )
        else:
            scores = deps.engine.score(description, now=current)
        analysis = analyze(
            description.name,
            description.tld,
            scores,
            deps.engine.market_data(description, now=current),
        )

        if as_json:
            document = {"domain": description.full_name, **scores.to_dict()}
            document["analysis"] = analysis.to_dict()
            typer.echo(json.dumps(document, indent=2))
            return
        rprint(_scores_table(description.full_name, scores))
        rprint(f"[bold]Outlook:[/bold] {analysis.outlook} - {analysis.recommendation}")
        rprint(f"  {analysis.summary}")
        rprint(f"  Strengths: {'; '.join(analysis.strengths)}")
        rprint(f"  Risks: {'; '.join(analysis.risks)}")

    @app.command(name="score-file")
    def score_file(
        ctx: typer.Context,
        input_path: Annotated[
            Path,
            typer.Option("--input", "-i", help="CSV of domain descriptions"),
        ] = DEFAULT_INPUT,
        out_dir: Annotated[
            Path,
            typer.Option("--output-dir", "-o", help="Directory for output files"),
        ] = DEFAULT_PROCESSED_DIR,
        now: NowOption = None,
    ) -> None:
        """Score every domain in a CSV, ordered by forecast."""
        state = _get_context(ctx)
        deps = state.build_dependencies()
        outs = run_score_domains(
            input_path=input_path,
            out_dir=out_dir,
            engine=deps.engine,
            fs=deps.fs,
            now=_resolve_now(now),
            progress=deps.progress,
        )
        rprint("[green]✓ Scoring complete:[/green]")
        for k, v in outs.items():
            rprint(f"  {k}: {v}")

    @app.command()
    def search(
        ctx: typer.Context,
        query: Annotated[str, typer.Argument(help='e.g. "top 5 low risk domains"')],
        input_path: Annotated[
            Path,
            typer.Option("--input", "-i", help="CSV of domain descriptions"),
        ] = DEFAULT_INPUT,
        now: NowOption = None,
    ) -> None:
        """Score a CSV of domains and list the ones matching a query."""
        state = _get_context(ctx)
        deps = state.build_dependencies()
        records = score_frame(deps.fs.read_csv(input_path), deps.engine, now=_resolve_now(now))
        filters = parse_query(query)
        if filters.sort_by is None:
            records = rank_by_forecast(records)
        results = apply_filters(records, filters)

        rprint(f"[bold]{explain_filters(filters)}[/bold]")
        if not results:
            rprint("[yellow]No domains match this query.[/yellow]")
            return
        table = Table()
        table.add_column("Domain")
        for dimension in DIMENSIONS:
            table.add_column(dimension.capitalize(), justify="right")
        table.add_column("Value", justify="right")
        table.add_column("Offers", justify="right")
        for record in results:
            table.add_row(
                record.full_name,
                *(str(getattr(record.scores, dimension)) for dimension in DIMENSIONS),
                f"{record.scores.current_value:,.2f}",
                str(record.offer_count),
            )
        rprint(table)

    @app.command(name="track")
    def track_command(
        ctx: typer.Context,
        token_id: Annotated[str, typer.Argument(help="Token id of the domain")],
        domain_name: Annotated[str, typer.Argument(help="Full domain name, e.g. defi.defi")],
        now: NowOption = None,
    ) -> None:
        """Start tracking a domain for new offers."""
        state = _get_context(ctx)
        deps = state.build_dependencies()
        store_path = Path(state.config.tracked_domains_path)
        tracked = load_tracked_domains(path=store_path, fs=deps.fs)
        if is_tracked(tracked, token_id):
            rprint(f"[yellow]Already tracking[/yellow] {token_id}")
            return
        save_tracked_domains(
            track(tracked, token_id, domain_name, now=_resolve_now(now)),
            path=store_path,
            fs=deps.fs,
        )
        rprint(f"[green]✓ Tracking:[/green] {domain_name} ({token_id})")

    @app.command(name="untrack")
    def untrack_command(
        ctx: typer.Context,
        token_id: Annotated[str, typer.Argument(help="Token id of the domain")],
    ) -> None:
        """Stop tracking a domain."""
        state = _get_context(ctx)
        deps = state.build_dependencies()
        store_path = Path(state.config.tracked_domains_path)
        tracked = load_tracked_domains(path=store_path, fs=deps.fs)
        if not is_tracked(tracked, token_id):
            rprint(f"[yellow]Not tracked:[/yellow] {token_id}")
            return
        save_tracked_domains(untrack(tracked, token_id), path=store_path, fs=deps.fs)
        rprint(f"[green]✓ Untracked:[/green] {token_id}")

    @app.command()
    def alerts(
        ctx: typer.Context,
        counts_path: Annotated[
            Path,
            typer.Option("--input", "-i", help="CSV with token_id and offer_count columns"),
        ] = DEFAULT_OFFERS_IN,
        now: NowOption = None,
    ) -> None:
        """Report tracked domains that received new offers since the last check."""
        state = _get_context(ctx)
        deps = state.build_dependencies()
        raised = run_offer_alerts(
            counts_path=counts_path,
            store_path=Path(state.config.tracked_domains_path),
            fs=deps.fs,
            now=_resolve_now(now),
        )
        if not raised:
            rprint("No new offers.")
            return
        for alert in raised:
            rprint(
                f"[green]●[/green] {alert.domain_name}: {alert.message} "
                f"(now {alert.offer_count})"
            )

    @app.command(name="export-weights")
    def export_weights(
        ctx: typer.Context,
        out_path: Annotated[
            Path,
            typer.Option("--output", "-o", help="Where to write the weights JSON document"),
        ] = DEFAULT_WEIGHTS_OUT,
    ) -> None:
        """Write the active weights document (built-in or DOMETRICS_WEIGHTS_PATH) as JSON."""
        state = _get_context(ctx)
        deps = state.build_dependencies()
        deps.fs.write_json(weights_to_document(deps.engine.weights), out_path)
        rprint(f"[green]✓ Weights {deps.engine.weights.version} written:[/green] {out_path}")

    _ = (main, score, score_file, search, track_command, untrack_command, alerts, export_weights)

    return app
