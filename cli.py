#!/usr/bin/env python3
"""
CLI for the Scorewise roster, stored matches and ball log replay
"""
import json
import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from app.config import configure_logging
from app.database import init_db, get_session
from app.engine.rules import get_match_result
from app.engine.scorecard import batting_card, bowling_card, innings_balls, replay_innings
from app.engine.state import Match
from app.engine.stats import LEADERBOARDS, batting_average, strike_rate, bowling_average, economy_rate
from app.store import PlayerStore, MatchStore

console = Console()


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def cli(log_level):
    """Scorewise - Community Cricket Scoring"""
    configure_logging(log_level)


@cli.command()
def init():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


@cli.command()
@click.argument("name")
@click.option("--short-id", default=None, help="Short handle shown on the scorecard")
@click.option("--photo-url", default=None)
@click.option("--member/--guest", default=True, help="Regular group member or a one-off guest")
def add_player(name: str, short_id: str, photo_url: str, member: bool):
    """Add a player to the roster"""
    init_db()
    session = get_session()
    try:
        player = PlayerStore(session).add(name=name, short_id=short_id, photo_url=photo_url, is_group_member=member)
    finally:
        session.close()
    console.print(f"[green]Added {player.name}[/green] ({player.id})")


@cli.command()
@click.option("--search", default=None, help="Filter by name or short id")
def list_players(search: str):
    """List the roster"""
    session = get_session()
    try:
        store = PlayerStore(session)
        players = store.search(search) if search else store.list()
    finally:
        session.close()

    if not players:
        console.print("[red]No players found. Add some with 'add-player'.[/red]")
        return

    table = Table(title=f"Players ({len(players)} total)")
    table.add_column("ID")
    table.add_column("Name", style="cyan")
    table.add_column("Short ID")
    table.add_column("M", justify="right")
    table.add_column("Runs", justify="right")
    table.add_column("Wkts", justify="right")
    table.add_column("MOTM", justify="right", style="green")

    for player in players:
        table.add_row(
            player.id,
            player.name,
            player.short_id or "",
            str(player.stats.matches_played),
            str(player.stats.runs_scored),
            str(player.stats.wickets_taken),
            str(player.stats.motm_awards),
        )

    console.print(table)


@cli.command()
@click.argument("player_id")
def player_stats(player_id: str):
    """Show a player's career statistics"""
    session = get_session()
    try:
        player = PlayerStore(session).get(player_id)
    finally:
        session.close()

    if player is None:
        console.print(f"[red]Player {player_id} not found[/red]")
        raise SystemExit(1)

    stats = player.stats
    console.print(Panel(f"[bold cyan]{player.name}[/bold cyan] - {stats.matches_played} matches"))

    bat = Table(title="Batting")
    for column in ("Runs", "Balls", "HS", "Avg", "SR", "4s", "6s", "50s", "100s", "Ducks"):
        bat.add_column(column, justify="right")
    bat.add_row(
        str(stats.runs_scored), str(stats.balls_faced), str(stats.highest_score),
        batting_average(stats), strike_rate(stats), str(stats.fours), str(stats.sixes),
        str(stats.fifties), str(stats.hundreds), str(stats.ducks),
    )
    console.print(bat)

    bowl = Table(title="Bowling")
    for column in ("Balls", "Runs", "Wkts", "Best", "Avg", "Econ", "Maidens"):
        bowl.add_column(column, justify="right")
    bowl.add_row(
        str(stats.balls_bowled), str(stats.runs_conceded), str(stats.wickets_taken),
        str(stats.best_bowling) if stats.best_bowling else "-",
        bowling_average(stats), economy_rate(stats), str(stats.maiden_overs),
    )
    console.print(bowl)

    console.print(
        f"[bold]Fielding:[/bold] {stats.catches} catches, {stats.run_outs} run outs, {stats.stumpings} stumpings"
    )
    console.print(f"[bold]Man of the Match:[/bold] {stats.motm_awards}")


@cli.command()
@click.argument("stat", type=click.Choice(list(LEADERBOARDS)), default="runs")
@click.option("--limit", default=10, show_default=True)
def leaderboard(stat: str, limit: int):
    """Rank the roster by runs, wickets, batting average or MOTM awards"""
    session = get_session()
    try:
        players = PlayerStore(session).leaderboard(stat, limit)
    finally:
        session.close()

    if not players:
        console.print("[red]No players with a completed match yet.[/red]")
        return

    table = Table(title=f"Leaderboard - {stat.replace('_', ' ')}")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("M", justify="right")
    table.add_column("Runs", justify="right")
    table.add_column("Avg", justify="right")
    table.add_column("Wkts", justify="right")
    table.add_column("MOTM", justify="right", style="green")

    for rank, player in enumerate(players, start=1):
        stats = player.stats
        table.add_row(
            str(rank),
            player.name,
            str(stats.matches_played),
            str(stats.runs_scored),
            batting_average(stats),
            str(stats.wickets_taken),
            str(stats.motm_awards),
        )

    console.print(table)


@cli.command()
@click.option("--completed/--all", default=False, help="Only show completed matches")
def matches(completed: bool):
    """List stored matches, newest first"""
    session = get_session()
    try:
        records = MatchStore(session).list(True if completed else None)
        rows = [
            (r.id, f"{r.team1_name} vs {r.team2_name}", r.phase, r.winner or "", r.start_time.strftime("%Y-%m-%d %H:%M"))
            for r in records
        ]
    finally:
        session.close()

    if not rows:
        console.print("[red]No matches found.[/red]")
        return

    table = Table(title="Matches")
    table.add_column("ID")
    table.add_column("Fixture", style="cyan")
    table.add_column("Phase")
    table.add_column("Result", style="green")
    table.add_column("Started")
    for row in rows:
        table.add_row(*row)
    console.print(table)


def _print_scorecard(match: Match, innings: int):
    """Print innings scorecard"""
    bat_table = Table(title=f"Innings {innings} - Batting")
    bat_table.add_column("Batter", style="cyan")
    bat_table.add_column("Dismissal")
    bat_table.add_column("R", justify="right")
    bat_table.add_column("B", justify="right")
    bat_table.add_column("4s", justify="right")
    bat_table.add_column("6s", justify="right")
    bat_table.add_column("SR", justify="right")

    for card in batting_card(match, innings):
        figures = card.figures
        dismissal = figures.dismissal.value.replace("_", " ") if figures.is_out else "not out"
        bat_table.add_row(
            card.player.name,
            dismissal,
            str(figures.runs),
            str(figures.balls),
            str(figures.fours),
            str(figures.sixes),
            f"{figures.strike_rate:.1f}",
        )

    console.print(bat_table)

    bowl_table = Table(title=f"Innings {innings} - Bowling")
    bowl_table.add_column("Bowler", style="magenta")
    bowl_table.add_column("O", justify="right")
    bowl_table.add_column("M", justify="right")
    bowl_table.add_column("R", justify="right")
    bowl_table.add_column("W", justify="right")
    bowl_table.add_column("Econ", justify="right")

    for card in bowling_card(match, innings):
        spell = card.spell
        bowl_table.add_row(
            card.player.name,
            spell.overs_display,
            str(spell.maidens),
            str(spell.runs),
            str(spell.wickets),
            f"{spell.economy:.1f}",
        )

    console.print(bowl_table)


@cli.command()
@click.argument("match_id")
def scorecard(match_id: str):
    """Print the scorecard of a stored match"""
    session = get_session()
    try:
        match = MatchStore(session).get(match_id)
    finally:
        session.close()

    if match is None:
        console.print(f"[red]Match {match_id} not found[/red]")
        raise SystemExit(1)

    console.print(Panel(f"[bold]{match.team1.name} vs {match.team2.name}[/bold] ({match.total_overs} overs)"))
    for innings in range(1, match.innings_number + 1):
        _print_scorecard(match, innings)

    console.print(f"\n[bold green]{get_match_result(match)}[/bold green]")
    if match.man_of_the_match:
        console.print(f"[bold]Man of the Match:[/bold] {match.man_of_the_match.name}")


@cli.command()
@click.argument("snapshot", type=click.File("r"))
def replay(snapshot):
    """Re-derive innings totals from a match snapshot's ball log"""
    match = Match.from_dict(json.load(snapshot))

    # After the break the side that batted first is the bowling side
    sides = [match.bowling_team, match.batting_team] if match.is_second_innings else [match.batting_team]

    table = Table(title=f"Replay of {match.id}")
    table.add_column("Innings")
    table.add_column("Team", style="cyan")
    table.add_column("Stored", justify="right")
    table.add_column("Replayed", justify="right")
    table.add_column("OK")

    mismatches = 0
    for innings, side in enumerate(sides, start=1):
        replayed = replay_innings(side.name, innings_balls(match, innings))
        stored_view = f"{side.score}/{side.wickets} ({side.overs_display}) x{side.extras.total}"
        replay_view = f"{replayed.score}/{replayed.wickets} ({replayed.overs_display}) x{replayed.extras.total}"
        ok = (
            (side.score, side.wickets, side.overs, side.balls, side.extras)
            == (replayed.score, replayed.wickets, replayed.overs, replayed.balls, replayed.extras)
        )
        if not ok:
            mismatches += 1
        table.add_row(str(innings), side.name, stored_view, replay_view, "[green]yes[/green]" if ok else "[red]no[/red]")

    console.print(table)
    if mismatches:
        console.print(f"[red]{mismatches} innings do not match their ball log[/red]")
        raise SystemExit(1)
    console.print("[green]Ball log and totals agree[/green]")


if __name__ == "__main__":
    cli()
