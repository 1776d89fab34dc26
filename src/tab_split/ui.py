"""Rich renderables for showing tabs in a host shell."""

from collections.abc import Iterable
from decimal import Decimal

from rich.table import Table

from .models import Tab


def format_currency(amount: Decimal, use_color: bool = False) -> str:
    """
    Format an amount as dollars, e.g. $1,234.50.

    With use_color, zero amounts are green (nothing owed).
    """
    formatted = f"${amount:,.2f}"
    if use_color and amount == 0:
        return f"[green]{formatted}[/green]"
    return formatted


def render_breakdown(tab: Tab) -> Table:
    """Per-friend breakdown of a tab with reminder status."""
    table = Table(
        title=f"{tab.restaurant_name} - {tab.date:%b %d, %Y}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Friend", style="cyan")
    table.add_column("Contact", style="dim")
    table.add_column("Owes", justify="right", width=12)
    table.add_column("Reminder", justify="center", width=10)

    for friend in tab.friends:
        if friend.is_you or friend.owes_amount <= 0:
            reminder = ""
        elif tab.has_reminded(friend.id):
            reminder = "[green]Sent[/green]"
        else:
            reminder = "[yellow]Remind[/yellow]"

        table.add_row(
            friend.display_name,
            friend.contact_info or "",
            format_currency(friend.owes_amount, use_color=True),
            reminder,
        )

    table.caption = f"Total: {format_currency(tab.total_amount)}"
    return table


def render_tab_list(tabs: Iterable[Tab], title: str = "Tabs") -> Table:
    """One row per tab: where, when, how much, and whether it is settled."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Restaurant", style="cyan", no_wrap=False)
    table.add_column("Date", style="dim", width=12)
    table.add_column("Friends", justify="right", width=8)
    table.add_column("Total", justify="right", width=12)
    table.add_column("Status", justify="center", width=10)

    for tab in tabs:
        table.add_row(
            tab.restaurant_name,
            f"{tab.date:%Y-%m-%d}",
            str(len(tab.friends)),
            format_currency(tab.total_amount),
            "[green]Settled[/green]" if tab.is_settled else "[yellow]Active[/yellow]",
        )

    return table
