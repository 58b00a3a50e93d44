"""
Flask CLI commands for care tasks and maintenance.

Usage:
    flask list-tasks                       # All tasks, sorted by due date
    flask list-tasks --view due            # Overdue or due today
    flask list-tasks --view upcoming --days 14
    flask schedule-reminders               # Recompute and register notifications
    flask clear-data                       # Dry run (count records)
    flask clear-data --confirm             # Delete all plants and photos
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from plant_companion.services.registry import get_services
from plant_companion.services.tasks import get_due_tasks, get_sorted_tasks, get_upcoming_tasks, generate_tasks
from plant_companion.utils.errors import CompanionError


def _load_plants():
    try:
        return get_services().plants.get_all_plants()
    except CompanionError as e:
        click.echo(f"Error: {e}")
        raise SystemExit(1)


def _describe(task) -> str:
    if task.is_overdue:
        status = f"overdue by {abs(task.days_until_due)}d"
    elif task.days_until_due == 0:
        status = "due today"
    else:
        status = f"in {task.days_until_due}d"
    return f"{task.due_date:%Y-%m-%d}  {task.plant_name:<24} {task.category:<14} {status}"


@click.command("list-tasks")
@click.option("--view", type=click.Choice(["all", "due", "upcoming"]), default="all",
              help="Which tasks to show.")
@click.option("--days", type=click.IntRange(1, 365), default=7,
              help="Look-ahead for the upcoming view.")
@with_appcontext
def list_tasks_command(view: str, days: int) -> None:
    """Print generated care tasks."""
    try:
        tasks = generate_tasks(_load_plants())
    except CompanionError as e:
        click.echo(f"Error: {e}")
        raise SystemExit(1)

    if view == "due":
        tasks = get_due_tasks(tasks)
    elif view == "upcoming":
        tasks = get_upcoming_tasks(tasks, days)
    else:
        tasks = get_sorted_tasks(tasks)

    if not tasks:
        click.echo("No tasks.")
        return

    for task in tasks:
        click.echo(_describe(task))
    click.echo(f"\n{len(tasks)} task(s).")


@click.command("schedule-reminders")
@with_appcontext
def schedule_reminders_command() -> None:
    """Recompute reminders and register notifications."""
    try:
        stats = get_services().reminders.schedule_reminders(_load_plants())
    except CompanionError as e:
        click.echo(f"Error: {e}")
        raise SystemExit(1)
    click.echo(f"Eligible: {stats['eligible']}, Scheduled: {stats['scheduled']}, Failed: {stats['failed']}")


@click.command("clear-data")
@click.option("--confirm", is_flag=True, default=False,
              help="Actually delete data. Without this flag, only counts records (dry run).")
@with_appcontext
def clear_data_command(confirm: bool) -> None:
    """Delete all plants and photos from storage (development only)."""
    services = get_services()
    plants = _load_plants()
    click.echo(f"Found {len(plants)} plant(s).")

    if not confirm:
        click.echo("\nDry run - nothing deleted. Use --confirm to delete.")
        return

    try:
        services.plants.clear()
        services.photos.clear()
    except CompanionError as e:
        click.echo(f"Failed: {e}")
        raise SystemExit(1)

    services.refresh_reminders()
    click.echo("Done. All plants and photos deleted.")
