"""Rich status panels for a running game.

Read-only: renders whatever the ledger currently holds and never mutates it.
"""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fishtycoon.game import bonuses, skills
from fishtycoon.game.ledger import Ledger
from fishtycoon.game.offline import OfflineProgress
from fishtycoon.game.scheduler import SEASONS


def format_number(n: int | float) -> str:
    """Compact money format: 1.2K, 3.4M."""
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return f"{n:.0f}"


def _build_header(ledger: Ledger) -> Panel:
    summary = bonuses.summarize(ledger)

    text = Text()
    text.append("  Money: ", style="bold")
    text.append(format_number(ledger.money), style="bold cyan")
    text.append("  Power: ", style="bold")
    text.append(f"{summary.fishing_power:.1f}", style="cyan")
    text.append("  Auto: ", style="bold")
    text.append(f"{summary.auto_fish_rate:.2f}", style="cyan")
    text.append("  Caught: ", style="bold")
    text.append(f"{ledger.total_fish_caught:,}", style="cyan")
    if ledger.is_fishing:
        text.append("  (fishing...)", style="yellow")

    season = SEASONS[ledger.season % len(SEASONS)]
    title = f"{ledger.active_location.name} - {season}"
    return Panel(text, title=title, border_style="bright_blue")


def _build_inventory(ledger: Ledger) -> Panel:
    table = Table(show_header=True, header_style="bold", box=None, expand=True)
    table.add_column("Fish", min_width=14)
    table.add_column("Rarity", width=10)
    table.add_column("Held", width=6, justify="right")
    table.add_column("Each", width=8, justify="right")

    for name, count in sorted(ledger.inventory.items()):
        species = ledger.catalog.species_named(name)
        if species is None or count <= 0:
            continue
        table.add_row(
            Text(name, style=species.color),
            species.rarity,
            str(count),
            format_number(bonuses.effective_sell_value(ledger, species.value)),
        )
    if table.row_count == 0:
        table.add_row("(empty)", "", "", "")
    return Panel(table, title="Inventory", border_style="green")


def _build_upgrades(ledger: Ledger) -> Panel:
    table = Table(show_header=True, header_style="bold", box=None, expand=True)
    table.add_column("Upgrade", min_width=18)
    table.add_column("Lvl", width=4, justify="right")
    table.add_column("Next", width=8, justify="right")

    for definition in ledger.catalog.upgrades:
        level = ledger.upgrade_level(definition.id)
        cost = "max" if definition.is_maxed(level) else format_number(ledger.upgrade_cost(definition.id))
        style = "green" if not definition.is_maxed(level) and ledger.money >= ledger.upgrade_cost(definition.id) else ""
        table.add_row(definition.name, str(level), Text(cost, style=style))
    return Panel(table, title="Upgrades", border_style="magenta")


def _build_skills(ledger: Ledger) -> Panel:
    table = Table(show_header=True, header_style="bold", box=None, expand=True)
    table.add_column("Skill", min_width=14)
    table.add_column("Lvl", width=4, justify="right")
    table.add_column("To next", width=8, justify="right")

    for definition in ledger.catalog.skills:
        state = ledger.skills.get(definition.id, skills.SkillState())
        remaining = skills.xp_to_next(definition, state)
        table.add_row(
            definition.name,
            str(state.level),
            "max" if remaining is None else f"{remaining:,} xp",
        )
    return Panel(table, title="Skills", border_style="blue")


def _build_progress(ledger: Ledger) -> Panel:
    progress = ledger.prestige_progress()
    required = progress.required

    def mark(met: bool) -> str:
        return "[green]✓[/green]" if met else "[red]✗[/red]"

    lines = [
        f"Encyclopedia: {ledger.discovered_count()}/{len(ledger.catalog.species)}"
        f" ({ledger.encyclopedia_completion_pct():.0f}%)",
        f"Prestige level: {ledger.prestige_level}",
        f"{mark(progress.money_met)} money {format_number(progress.money)}"
        f"/{format_number(required.money)}",
        f"{mark(progress.fish_met)} fish {progress.fish_caught:,}/{required.fish_caught:,}",
        f"{mark(progress.locations_met)} locations {progress.locations_unlocked}"
        f"/{required.locations_unlocked}",
        f"{mark(progress.encyclopedia_met)} encyclopedia {progress.encyclopedia_pct:.0f}%"
        f"/{required.encyclopedia_pct:.0f}%",
    ]
    unread = len(ledger.unread_emails())
    if unread:
        lines.append(f"[yellow]{unread} unread message(s)[/yellow]")
    return Panel("\n".join(lines), title="Progress", border_style="yellow")


def offline_summary(progress: OfflineProgress) -> Panel | None:
    """Welcome-back panel, or None when nothing happened offline."""
    if progress.is_empty:
        return None
    minutes = progress.elapsed_ms / 60_000
    text = (
        f"Away for {minutes:.0f} min: caught {progress.catches:,} fish"
        f" ({progress.fish_gained:,} kept, {progress.auto_sold:,} sold"
        f" for {format_number(progress.money_gained)})"
    )
    return Panel(text, title="Welcome back", border_style="cyan")


def render(ledger: Ledger) -> Group:
    """The full dashboard for one ledger."""
    return Group(
        _build_header(ledger),
        _build_inventory(ledger),
        _build_upgrades(ledger),
        _build_skills(ledger),
        _build_progress(ledger),
    )
