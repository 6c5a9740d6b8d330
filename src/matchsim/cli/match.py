"""Match subcommand: run, report, list."""

from __future__ import annotations

import random

import typer

from matchsim.simulation.result import MatchResult
from matchsim.simulation.runner import get_match_result, list_match_results, run_match, save_match_result
from matchsim.simulation.strategies.fixed_stake import FixedStakeBettor
from matchsim.storage.db import get_connection, init_schema

app = typer.Typer(help="Headless match simulation")


def _echo_result(result: MatchResult) -> None:
    typer.echo(f"Run: {result.run_id}  Seed: {result.seed}")
    typer.echo(
        f"{result.home_team} {result.home_score} - {result.away_score} {result.away_team}  ({result.final_outcome})"
    )
    typer.echo(f"Events processed: {result.events_processed}")
    typer.echo(f"Wagers: {result.wagers_placed} placed, {result.wagers_won} won, {result.total_staked:.2f} staked")
    for w in result.wagers:
        boost = " x2" if w["multiplier_applied"] else ""
        typer.echo(
            f"  {w['wager_id']:<4} {w['kind']:<11} {w['outcome_id']:<15} "
            f"{w['stake']:8.2f} @ {w['odds']:<5g}{boost}  {w['status']:<9} {w['payout']:8.2f}"
        )
    typer.echo(f"Balance: {result.starting_balance:.2f} -> {result.final_balance:.2f}  (profit {result.profit:+.2f})")


@app.command("run")
def run(
    ctx: typer.Context,
    seed: int | None = typer.Option(None, "--seed", "-s", help="Random seed"),
    stake: float = typer.Option(0.0, "--stake", help="Auto-bet this stake on every opportunity (0 = watch only)"),
    back: str = typer.Option("home", "--back", help="Full-match outcome to back: home, draw or away"),
    save: bool = typer.Option(False, "--save", help="Persist the result to the run store"),
    show_feed: bool = typer.Option(True, "--feed/--no-feed", help="Print the match feed"),
) -> None:
    """Simulate a full match with the configured settings."""
    settings = ctx.obj["settings"]
    bettor = None
    if stake > 0:
        try:
            bettor = FixedStakeBettor(stake=stake, back=back, rng=random.Random(seed))
        except ValueError as e:
            typer.echo(str(e))
            raise typer.Exit(1)
    try:
        result = run_match(settings, seed=seed, bettor=bettor)
    except ValueError as e:
        typer.echo(f"Invalid match settings: {e}")
        raise typer.Exit(1)
    if show_feed:
        for entry in result.feed:
            typer.echo(f"  {entry['time']:5.1f}'  {entry['text']}")
    _echo_result(result)
    if bettor is not None and bettor.rejections:
        typer.echo(f"Rejected wagers: {len(bettor.rejections)}")
    if save:
        conn = get_connection(settings.db_path)
        init_schema(conn)
        try:
            save_match_result(conn, result)
        finally:
            conn.close()
        typer.echo(f"Saved run {result.run_id}")


@app.command("report")
def report(
    ctx: typer.Context,
    run_id: str = typer.Option(..., "--run-id", help="Match run ID"),
) -> None:
    """Show a stored match run."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        result = get_match_result(conn, run_id)
        if not result:
            typer.echo(f"Run not found: {run_id}")
            raise typer.Exit(1)
        _echo_result(result)
    finally:
        conn.close()


@app.command("list")
def list_runs(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum runs to show"),
) -> None:
    """List stored match runs, newest first."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        results = list_match_results(conn, limit=limit)
        if not results:
            typer.echo("No runs stored. Use 'matchsim match run --save'.")
            return
        for r in results:
            typer.echo(
                f"  {r.run_id}  {r.home_team} {r.home_score}-{r.away_score} {r.away_team}"
                f"  balance {r.final_balance:.2f}"
            )
    finally:
        conn.close()
