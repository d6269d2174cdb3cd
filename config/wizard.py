"""Interaktiver Setup-Wizard für die Ersteinrichtung der Strukturverwaltung.

Fragt Hochschule, Ablageorte und Vorgaben für neue Studienabschnitte ab.
Nutzt rich für die Konsolenausgabe.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import AppConfig, LoggingConfig, StorageConfig, StructureDefaults
from config.defaults import default_structure_defaults

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


# ─── SCHRITT 1: Hochschule ───

def _wizard_institution() -> str:
    _header("Schritt 1: Hochschule")
    return Prompt.ask("Name der Hochschule", default="Muster-Hochschule")


# ─── SCHRITT 2: Ablage ───

def _wizard_storage() -> StorageConfig:
    _header("Schritt 2: Ablage")
    _info("Fachbereiche und Studienabschnitte werden als JSON gespeichert.")
    defaults = StorageConfig()
    data_path = Prompt.ask("Datendatei", default=defaults.data_path)
    quiz_path = Prompt.ask("Datei der Quiz-Einstellungen", default=defaults.quiz_settings_path)
    return StorageConfig(data_path=data_path, quiz_settings_path=quiz_path)


# ─── SCHRITT 3: Vorgaben ───

def _wizard_defaults() -> StructureDefaults:
    _header("Schritt 3: Vorgaben für neue Studienabschnitte")
    d = default_structure_defaults()
    credits = IntPrompt.ask("Default-Credits", default=d.default_credits)
    section = Prompt.ask("Abschnitt für neue Semester", default=d.default_section)
    raw = Prompt.ask("Semester pro Jahr (kommagetrennt)",
                     default=",".join(str(s) for s in d.default_semesters))
    semesters = [int(s) for s in raw.replace(";", ",").split(",") if s.strip()]
    return StructureDefaults(default_credits=credits, default_section=section,
                             default_semesters=semesters)


def _show_summary(config: AppConfig) -> None:
    _header("Zusammenfassung")
    table = Table(box=box.ROUNDED, title="Konfigurationsübersicht")
    table.add_column("Bereich", style="bold cyan")
    table.add_column("Wert")

    table.add_row("Hochschule", config.institution_name)
    table.add_row("Datendatei", config.storage.data_path)
    table.add_row("Quiz-Einstellungen", config.storage.quiz_settings_path)
    table.add_row("Default-Credits", str(config.defaults.default_credits))
    table.add_row("Default-Abschnitt", config.defaults.default_section)
    table.add_row("Semester pro Jahr",
                  ", ".join(str(s) for s in config.defaults.default_semesters))
    console.print(table)


# ─── HAUPT-WIZARD ───

def run_wizard() -> Optional[AppConfig]:
    """Führt den interaktiven Setup-Wizard aus.

    Returns:
        Fertige AppConfig oder None, wenn der Nutzer abbricht.
    """
    console.print(Panel(
        "[bold]Willkommen bei der Strukturverwaltung![/bold]\n\n"
        "Der Wizard legt die Grundkonfiguration an.\n"
        "[dim]Standard-Werte können mit Enter übernommen werden.[/dim]",
        border_style="cyan",
    ))

    try:
        config = AppConfig(
            institution_name=_wizard_institution(),
            storage=_wizard_storage(),
            defaults=_wizard_defaults(),
            logging=LoggingConfig(),
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Wizard abgebrochen.[/yellow]")
        return None
    except ValueError as e:
        console.print(f"\n[red]Ungültige Eingabe: {e}[/red]")
        return None

    _show_summary(config)
    if not Confirm.ask("\nKonfiguration speichern?", default=True):
        console.print("[yellow]Konfiguration wird nicht gespeichert.[/yellow]")
        return None

    _success("Konfiguration wird gespeichert...")
    return config
