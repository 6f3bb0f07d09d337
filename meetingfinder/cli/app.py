"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from pendulum import Date
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.event_file_client import SAMPLE_EVENTS_FILE, EventFileClient
from ..adapters.graph_authenticator import GraphAuthenticator
from ..adapters.graph_client import GraphClient
from ..config import AppConfig, get_default_config_path
from ..domain.calendar_day import format_window
from ..domain.exceptions import MeetingFinderError
from ..domain.models import MeetingRequest
from ..services.meeting_finder import CalendarClientProtocol, MeetingFinderService

app = typer.Typer(
    name="meetingfinder",
    help="Find free meeting windows within a day",
    add_completion=False
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _parse_day(value: Optional[str], tz: str) -> Date:
    if not value:
        return pendulum.now(tz).date()

    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Fehler beim Parsen des Datums: {e}[/red]")
        raise typer.Exit(1)


def _run_interactive_wizard(config: AppConfig, console: Console) -> dict:
    """
    Ask for the meeting parameters when none were given on the command line.

    Returns:
        Dictionary with keys: participants, optional, duration_minutes, date
    """
    console.print("[bold]1️⃣  Teilnehmer auswählen[/bold]")
    console.print("\nVerfügbare Kollegen:")
    for idx, colleague in enumerate(config.colleagues, 1):
        console.print(f"  {idx}. {colleague.name} ({colleague.email})")

    def pick(prompt: str, default: str) -> List[str]:
        picked = []
        for item in typer.prompt(prompt, default=default).split():
            if item.isdigit():
                idx = int(item) - 1
                if 0 <= idx < len(config.colleagues):
                    picked.append(config.colleagues[idx].name)
                else:
                    console.print(f"[yellow]Warnung: Nummer {item} ungültig, überspringe[/yellow]")
            elif item != "-":
                picked.append(item)
        return picked

    participants = pick("\n→ Pflicht-Teilnehmer (Namen oder Nummern)", "1")
    optional = pick("→ Optionale Teilnehmer (- für keine)", "-")

    console.print("\n[bold]2️⃣  Meeting-Dauer[/bold]")
    duration_minutes = typer.prompt(
        "→ Dauer in Minuten",
        default=config.defaults.duration_minutes,
        type=int
    )

    console.print("\n[bold]3️⃣  Tag festlegen[/bold]")
    date = typer.prompt(
        "→ Datum (YYYY-MM-DD)",
        default=pendulum.now(config.timezone).format("YYYY-MM-DD")
    ).strip()

    console.print("\n" + "=" * 60 + "\n")

    return {
        "participants": participants,
        "optional": optional,
        "duration_minutes": duration_minutes,
        "date": date,
    }


def _build_authenticator(config: AppConfig) -> GraphAuthenticator:
    return GraphAuthenticator(
        client_id=config.client_id,
        tenant_id=config.tenant_id,
        token_cache=config.token_cache,
        cache_file=config.token_cache_file,
        authority_url=config.get_authority_url()
    )


def _build_calendar_client(
    config: AppConfig,
    *,
    mock: bool,
    events_file: Optional[Path]
) -> CalendarClientProtocol:
    """Pick the calendar source: bundled sample data, an event file, or Microsoft Graph."""
    if mock:
        console.print("[yellow]⊘ Verwende Beispieldaten[/yellow]")
        return EventFileClient(SAMPLE_EVENTS_FILE)

    source = events_file or config.events_file
    if source is not None:
        console.print(f"[dim]Termine aus {source}[/dim]")
        return EventFileClient(source)

    access_token = _build_authenticator(config).get_access_token(force_refresh=False)
    return GraphClient(access_token=access_token)


@app.command()
def find(
    participants: Annotated[Optional[List[str]], typer.Argument(help="Pflicht-Teilnehmer (Namen oder E-Mails). Ohne Eingabe startet der Assistent.")] = None,
    optional: Annotated[Optional[List[str]], typer.Option("--optional", "-o", help="Optionale Teilnehmer (mehrfach angebbar).")] = None,
    date: Annotated[Optional[str], typer.Option("--date", help="Tag der Suche (YYYY-MM-DD), Standard: heute")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Meeting duration in minutes")] = None,
    events: Annotated[Optional[Path], typer.Option("--events", help="JSON/YAML-Datei mit Terminen statt Microsoft Graph.")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Beispieldaten nutzen und Authentifizierung überspringen.")] = False,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug-Ausgaben anzeigen.")] = False,
):
    """
    Find free meeting windows on one day.

    Examples:

        # Interactive mode
        meetingfinder find

        # Mandatory and optional participants
        meetingfinder find alice bob --optional carol --duration 60

        # Another day, local event file
        meetingfinder find alice --date 2024-11-25 --events termine.yaml

        # Use the bundled sample data
        meetingfinder find alice bob --mock --date 2024-11-25
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        tz = config.timezone

        console.print("\n" + "=" * 60)
        console.print("[bold cyan]🗓️  Meetingfinder - Freie Zeitfenster finden[/bold cyan]")
        console.print("=" * 60 + "\n")

        if participants:
            mandatory_names = list(participants)
            optional_names = list(optional or [])
            min_duration = duration if duration is not None else config.defaults.duration_minutes
            day = _parse_day(date, tz)
        else:
            wizard_result = _run_interactive_wizard(config, console)
            mandatory_names = wizard_result["participants"]
            optional_names = wizard_result["optional"]
            min_duration = wizard_result["duration_minutes"]
            day = _parse_day(wizard_result["date"], tz)

        try:
            mandatory_emails = config.resolve_participants(mandatory_names)
            optional_emails = config.resolve_participants(optional_names)
            request = MeetingRequest(
                duration=min_duration,
                attendees=frozenset(mandatory_emails),
                optional_attendees=frozenset(optional_emails),
            )
        except ValueError as e:
            console.print(f"[bold red]Fehler:[/bold red] {e}")
            raise typer.Exit(1)

        console.print("[bold cyan]📊 Zusammenfassung:[/bold cyan]")
        console.print(f"   Teilnehmer: {', '.join(mandatory_emails) or '-'}")
        if optional_emails:
            console.print(f"   Optional: {', '.join(optional_emails)}")
        console.print(f"   Tag: {day.format('DD.MM.YYYY')}")
        console.print(f"   Dauer: {min_duration} Minuten")
        console.print()

        console.print("[bold]Schritt 1/2:[/bold] Kalender-Daten abrufen...")
        client = _build_calendar_client(config, mock=mock, events_file=events)
        service = MeetingFinderService(calendar_client=client)

        console.print("\n[bold]Schritt 2/2:[/bold] Freie Zeitfenster berechnen...")
        windows = service.find_times(day=day, request=request, timezone=tz)

        console.print()
        if not windows:
            console.print(
                "[yellow]⚠ Keine freien Zeitfenster gefunden.[/yellow]\n"
                "Versuchen Sie einen anderen Tag oder eine kürzere Dauer."
            )
        else:
            console.print(f"[bold green]✓ {len(windows)} freie(s) Zeitfenster gefunden:[/bold green]\n")
            for window in windows:
                console.print(f"  {format_window(window, day)}")

        console.print()

    except (FileNotFoundError, ValueError, MeetingFinderError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def list_colleagues(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    List all configured colleagues.
    """
    try:
        config = _load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)

    if not config.colleagues:
        console.print("[yellow]Keine Kollegen in der Config-Datei definiert.[/yellow]")
        return

    table = Table(
        title="Konfigurierte Kollegen",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Name (Alias)", style="bold yellow")
    table.add_column("E-Mail", style="dim")

    for colleague in config.colleagues:
        table.add_row(colleague.name, colleague.email)

    console.print()
    console.print(table)
    console.print()


@app.command()
def test_auth(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Force re-authentication"
    )
):
    """
    Test Microsoft Graph authentication.
    """
    try:
        config = _load_config(config_file)

        console.print("\n[bold]Teste Microsoft Graph Anmeldung...[/bold]\n")

        authenticator = _build_authenticator(config)
        access_token = authenticator.get_access_token(force_refresh=force)

        client = GraphClient(access_token=access_token)
        user_info = client.test_connection()

        console.print(Panel.fit(
            f"[bold green]✓ Authentifizierung erfolgreich![/bold green]\n\n"
            f"[bold]Benutzer:[/bold] {user_info.get('displayName', 'N/A')}\n"
            f"[bold]E-Mail:[/bold] {user_info.get('mail') or user_info.get('userPrincipalName', 'N/A')}\n"
            f"[bold]Token-Speicher:[/bold] {authenticator.token_cache}",
            title="✓ Verbindungstest"
        ))
        console.print()

    except (FileNotFoundError, ValueError, MeetingFinderError) as e:
        console.print(f"\n[bold red]✗ Fehler:[/bold red] {e}\n")
        raise typer.Exit(1)


@app.command()
def clear_cache(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    Clear the authentication token cache.
    """
    try:
        config = _load_config(config_file)

        _build_authenticator(config).clear_cache()

        console.print("\n[green]✓ Token-Cache gelöscht.[/green]")
        console.print("Sie müssen sich beim nächsten Aufruf neu authentifizieren.\n")

    except (FileNotFoundError, ValueError, MeetingFinderError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]meetingfinder[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
