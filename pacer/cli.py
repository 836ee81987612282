import os

import click
import httpx
from rich.console import Console
from rich.table import Table

from pacer.errors import InvalidInput
from pacer.services.pace import pace_zones, target_pace

console = Console()

API_BASE_URL = os.getenv("PACER_API_URL", "http://localhost:8000")


def _client(user_id: str) -> httpx.Client:
    return httpx.Client(base_url=API_BASE_URL, headers={"X-User-Id": user_id}, timeout=60.0)


@click.group()
@click.option('--user', envvar='PACER_USER_ID', default='local', help='User id sent as X-User-Id')
@click.pass_context
def cli(ctx, user: str):
    """Pacer marathon training CLI"""
    ctx.obj = {"user": user}


@cli.command()
@click.argument('finish_time')
def paces(finish_time: str):
    """Show target pace and training zones for a finish time"""
    try:
        zones = pace_zones(finish_time)
    except InvalidInput as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    console.print(f"Target pace: [bold]{target_pace(finish_time)}[/bold] /mile")
    table = Table(title=f"Pace zones for {finish_time}")
    table.add_column("Zone", style="cyan")
    table.add_column("Pace /mile", style="green")
    for name, pace in zones.items():
        table.add_row(name, pace)
    console.print(table)


@cli.command()
@click.pass_obj
def status(obj):
    """Show this week's dashboard"""
    try:
        with _client(obj["user"]) as client:
            response = client.get("/api/dashboard")
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    volume = data["weekly_volume"]
    nutrition = data["today_nutrition"]
    console.print(f"[bold]{data['target_time']}[/bold] goal, {data['target_pace']}/mile")
    console.print(f"Days to race: {data['days_to_race_label']}")
    console.print(
        f"Week {data['current_week']} (week of {data['week_of']}): "
        f"{volume['actual']:.1f} / {volume['planned']:.1f} mi, "
        f"{data['runs_completed']}/{data['runs_total']} runs"
    )
    console.print(
        f"Today: {nutrition['calories']} cal "
        f"(P {nutrition['protein']}g, C {nutrition['carbs']}g, F {nutrition['fats']}g), "
        f"carb target {data['carb_target']}g"
    )
    console.print(f"[italic]{data['quote']}[/italic]")


@cli.command()
@click.argument('week', type=int)
@click.pass_obj
def week(obj, week: int):
    """Show one week of the training plan"""
    try:
        with _client(obj["user"]) as client:
            response = client.get(f"/api/plan/{week}")
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    table = Table(title=f"Week {week}")
    table.add_column("Day", style="cyan")
    table.add_column("Type", style="white")
    table.add_column("Planned", style="magenta")
    table.add_column("Actual", style="green")
    table.add_column("Pace", style="blue")
    for workout in data["workouts"]:
        actual = workout["actual"]
        actual_text = "-" if actual is None else f"{actual}"
        if workout["from_strava"]:
            actual_text += " (Strava)"
        table.add_row(workout["day"], workout["type"], f"{workout['planned']}", actual_text, workout["pace"] or "")
    console.print(table)
    console.print(f"{data['progress_percent']:.0f}% of planned miles completed")


@cli.command()
@click.pass_obj
def sync(obj):
    """Pull recent runs from Strava into the plan"""
    try:
        with _client(obj["user"]) as client:
            response = client.post("/api/strava/sync")
            response.raise_for_status()
            data = response.json()
        console.print(f"[green]✓[/green] {data['message']}")
    except httpx.HTTPError as e:
        console.print(f"[red]Error:[/red] {e}")


@cli.command()
@click.argument('carbs', type=int)
@click.argument('protein', type=int)
@click.argument('fats', type=int)
@click.pass_obj
def macros(obj, carbs: int, protein: int, fats: int):
    """Log a meal's macros in grams"""
    try:
        with _client(obj["user"]) as client:
            response = client.post("/api/nutrition", json={"carbs": carbs, "protein": protein, "fats": fats})
            response.raise_for_status()
            data = response.json()
        console.print(f"[green]✓[/green] Logged {data['calories']} cal")
    except httpx.HTTPError as e:
        console.print(f"[red]Error:[/red] {e}")


@cli.command()
@click.argument('message')
@click.pass_obj
def chat(obj, message: str):
    """Ask the coach a single question"""
    try:
        with _client(obj["user"]) as client:
            response = client.post("/api/coach/chat", json={"history": [], "message": message})
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    console.print(data["reply"])
    for update in data["updates"]:
        console.print(
            f"  [cyan]Week {update['week']} {update['day']}[/cyan]: "
            f"{update['type']}, {update['mileage']} mi @ {update['pace']}"
        )


if __name__ == '__main__':
    cli()
