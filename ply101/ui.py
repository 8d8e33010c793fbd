"""UI display helpers — header, now-playing lines, channel picker."""
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import IntPrompt
from rich.table import Table

from .config import APP_VERSION
from .models import ChannelGroup, TrackSnapshot

console = Console()


def format_time(seconds: int) -> str:
    """minutes:seconds, no zero padding (65 -> '1:5')."""
    m, s = divmod(int(seconds), 60)
    return f"{m}:{s}"


def print_header():
    console.print(
        f"\n  [bold cyan]♪  101 Player[/bold cyan]"
        f"  [dim]v{APP_VERSION}[/dim]"
    )


def print_hotkeys(hotkeys: list[dict]):
    keys = " · ".join(f"{h.get('key')} {h.get('desc', '')}".strip() for h in hotkeys)
    console.print(Panel(
        f"  [bold]Shortcuts[/bold]  [dim]│[/dim]  {escape(keys)} · q quit",
        border_style="dim",
        expand=False,
        padding=(0, 1),
    ))


def print_playing_channel(title: str):
    console.print(f"\n  [bold]Playing:[/bold] {escape(title)}\n")


def now_playing_line(snapshot: TrackSnapshot, next_check: int) -> str:
    album = f" [{snapshot.album_title}]" if snapshot.album_title else ""
    return f"now playing: {snapshot.artist} - {snapshot.title}{album} next check in {format_time(next_check)}"


def print_now_playing(snapshot: TrackSnapshot, next_check: int):
    """Notification sink for track changes."""
    console.print(f"  [green]♫[/green] {escape(now_playing_line(snapshot, next_check))}", highlight=False)


def print_playback_error(message: str):
    console.print(f"  [red]✗[/red] [dim]{escape(message)}[/dim]")


def print_toggle(paused: bool):
    if paused:
        console.print("  [yellow]⏸[/yellow] [dim]paused — press your hotkey to resume[/dim]")
    else:
        console.print("  [green]▶[/green] [dim]resumed[/dim]")


def _groups_table(groups: dict[int, ChannelGroup]) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("#", style="dim", width=6)
    table.add_column("Group", style="white")
    table.add_column("Channels", width=9)
    for gid in sorted(groups):
        g = groups[gid]
        table.add_row(str(g.id), escape(g.title), str(len(g.channels)))
    return table


def _channels_table(group: ChannelGroup) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("#", style="dim", width=6)
    table.add_column("Channel", style="white")
    for cid in sorted(group.channels):
        table.add_row(str(cid), escape(group.channels[cid].title))
    return table


def choose_channel(groups: dict[int, ChannelGroup]) -> Optional[int]:
    """Ask for a group, then a channel inside it. Returns None on bad input."""
    console.print("\n  [bold]Choose group:[/bold]")
    console.print(_groups_table(groups))
    gid = IntPrompt.ask("\n  Group", console=console)
    group = groups.get(gid)
    if group is None:
        console.print(f"  [red]No group {gid}.[/red]")
        return None

    console.print("\n  [bold]Choose channel:[/bold]")
    console.print(_channels_table(group))
    cid = IntPrompt.ask("\n  Channel", console=console)
    if cid not in group.channels:
        console.print(f"  [red]No channel {cid} in {group.title}.[/red]")
        return None
    return cid
