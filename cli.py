#!/usr/bin/env python3
"""
CLI for operating the Sixers scoring service
"""
import logging
import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from sixers.config import settings
from sixers.database import init_db, get_session
from sixers.errors import ScoringError
from sixers.engine.rules import ScoringRuleResolver, seed_default_rules
from sixers.engine.lifecycle import MatchLifecycleManager
from sixers.engine.matchups import MatchupAggregator

console = Console()


@click.group()
def cli():
    """Sixers - Live Cricket Scoring & Fantasy Leagues"""
    logging.basicConfig(level=settings.LOG_LEVEL)


@cli.command()
def init():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


@cli.command()
@click.option("--league", type=int, default=None, help="Seed a league's own copy instead of the global defaults")
def seed_rules(league):
    """Install the default scoring rule table"""
    init_db()
    session = get_session()
    try:
        added = seed_default_rules(session, league)
    finally:
        session.close()

    if added:
        console.print(f"[green]{added} scoring rules installed![/green]")
    else:
        console.print("[yellow]Rules already present, nothing to do.[/yellow]")


@cli.command()
@click.option("--league", type=int, default=None, help="League id (defaults when omitted)")
def rules(league):
    """Print the effective scoring rules for a league"""
    session = get_session()
    try:
        rule_set = ScoringRuleResolver(session).resolve_rules(league)
    except ScoringError as e:
        console.print(f"[red]{e.message}[/red]")
        return
    finally:
        session.close()

    title = f"League {league} Scoring Rules" if league else "Default Scoring Rules"
    table = Table(title=title)
    table.add_column("Stat", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Mode")
    table.add_column("Points", justify="right", style="green")
    table.add_column("Threshold / Band", justify="right")
    table.add_column("Source")

    for rule in rule_set:
        if rule.multiplier is not None:
            points = f"x{rule.multiplier:g}"
        elif rule.per_unit_points is not None:
            points = f"{rule.per_unit_points:g} each"
        else:
            points = f"{rule.flat_points or 0:g}"
        if rule.band:
            limit = str(rule.band)
        elif rule.threshold is not None:
            limit = f"{rule.threshold:g}"
        else:
            limit = ""
        table.add_row(
            rule.stat,
            rule.category,
            rule.mode,
            points,
            limit,
            "league" if rule.league_id else "default",
        )

    console.print(table)


@cli.command()
@click.argument("match_id", type=int)
def match(match_id: int):
    """Print a match scorecard"""
    session = get_session()
    try:
        snapshot = MatchLifecycleManager(session).snapshot(match_id)
        m = snapshot.match
        console.print(Panel(
            f"[bold]{m.home_team.name}[/bold] {m.home_team_score}/{m.home_team_wickets} ({_overs(m.home_team_balls)})\n"
            f"[bold]{m.away_team.name}[/bold] {m.away_team_score}/{m.away_team_wickets} ({_overs(m.away_team_balls)})\n"
            f"Status: {m.status.value}  Balls recorded: {len(snapshot.timeline)}",
            title=f"Match {m.id}",
        ))

        for name, lines in ((m.home_team.name, snapshot.home_team_players),
                            (m.away_team.name, snapshot.away_team_players)):
            _print_performances(name, lines)
    except ScoringError as e:
        console.print(f"[red]{e.message}[/red]")
    finally:
        session.close()


def _overs(balls: int) -> str:
    return f"{(balls or 0) // 6}.{(balls or 0) % 6}"


def _print_performances(team_name: str, lines):
    """Print one side's stat lines"""
    table = Table(title=team_name)
    table.add_column("Player", style="cyan")
    table.add_column("R", justify="right")
    table.add_column("B", justify="right")
    table.add_column("4s", justify="right")
    table.add_column("6s", justify="right")
    table.add_column("O", justify="right")
    table.add_column("RC", justify="right")
    table.add_column("W", justify="right", style="green")
    table.add_column("Ct", justify="right")
    table.add_column("RO", justify="right")

    for line in lines:
        table.add_row(
            line.player_name,
            str(line.runs_scored),
            str(line.balls_faced),
            str(line.fours),
            str(line.sixes),
            _overs(line.balls_bowled),
            str(line.runs_conceded),
            str(line.wickets_taken),
            str(line.catches),
            str(line.run_outs),
        )

    console.print(table)


@cli.command()
@click.argument("matchup_id", type=int)
def matchup(matchup_id: int):
    """Print a fantasy matchup breakdown"""
    session = get_session()
    try:
        result = MatchupAggregator(session).compute_matchup_score(matchup_id)
    except ScoringError as e:
        console.print(f"[red]{e.message}[/red]")
        return
    finally:
        session.close()

    console.print(Panel(
        f"[bold]{result.score1:.1f}[/bold] - [bold]{result.score2:.1f}[/bold]\n"
        f"State: {result.state.value}" + ("" if result.is_valid else "  [yellow](not started)[/yellow]"),
        title=f"Matchup {result.matchup_id} - week {result.match_num}",
    ))

    for label, side in (("Team 1", result.side1), ("Team 2", result.side2)):
        table = Table(title=f"{label} (instance {side.instance_id})")
        table.add_column("Slot")
        table.add_column("Player", justify="right")
        table.add_column("Role")
        table.add_column("Base", justify="right")
        table.add_column("Mult", justify="right")
        table.add_column("Points", justify="right", style="green")

        for line in side.players:
            role = "C" if line.is_captain else "VC" if line.is_vice_captain else ""
            table.add_row(
                line.slot,
                str(line.player_id),
                role,
                f"{line.score.base_points:g}",
                f"{line.score.multiplier:g}",
                f"{line.points:g}",
            )

        console.print(table)


if __name__ == "__main__":
    cli()
