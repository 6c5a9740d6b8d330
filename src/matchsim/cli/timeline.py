"""Timeline subcommand: show."""

from __future__ import annotations

from collections import Counter

import typer

from matchsim.timeline.generator import SpacingBounds, generate

app = typer.Typer(help="Synthesized match timelines")


@app.command("show")
def show(
    ctx: typer.Context,
    seed: int | None = typer.Option(None, "--seed", "-s", help="Random seed (same seed -> same timeline)"),
) -> None:
    """Generate and print a match timeline without playing it."""
    settings = ctx.obj["settings"]
    try:
        events = generate(
            settings.match_duration,
            settings.distribution,
            SpacingBounds(settings.spacing_min, settings.spacing_max),
            seed=seed,
            home_team=settings.home_team,
            away_team=settings.away_team,
        )
    except ValueError as e:
        typer.echo(f"Invalid timeline settings: {e}")
        raise typer.Exit(1)
    typer.echo(f"{settings.home_team} vs {settings.away_team}  ({len(events)} events)")
    for event in events:
        typer.echo(f"  {event.time:5.1f}'  {event.event_id:<4} {event.kind.value:<20} {event.description}")
    counts = Counter(e.kind.value for e in events)
    typer.echo("Counts: " + ", ".join(f"{k}={n}" for k, n in sorted(counts.items())))
