"""Studienstruktur: Haupt-CLI.

Verwendung:
  python main.py setup                              Ersteinrichtung (Wizard)
  python main.py config show|edit                   Konfiguration anzeigen/bearbeiten
  python main.py department add|edit|list|delete    Fachbereiche verwalten
  python main.py detail set|list|delete             Studienabschnitte verwalten
  python main.py section add|remove                 Abschnitte (A, B, ...) pflegen
  python main.py subject add|edit|remove|list       Fächer pflegen
  python main.py year configure|delete              Jahre anlegen/löschen
  python main.py semester delete <jahr> <sem>       Semester überall löschen
  python main.py structure                          Strukturbaum anzeigen
  python main.py check                              Konsistenz-Check
  python main.py import details|departments <datei> Excel/CSV importieren
  python main.py template                           Excel-Import-Vorlage erzeugen
  python main.py seed                               Beispieldaten anlegen
  python main.py quiz-settings show|set             Quiz-Sicherheitseinstellungen
"""

import functools
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree
from rich import box

from structure.errors import StructureError

console = Console()


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus."
        )
        sys.exit(1)
    return mgr, mgr.load()


def _open_store():
    """Konfiguration laden und den Store über der JSON-Datendatei öffnen."""
    from structure.backend import JsonFileBackend
    from structure.store import StructureStore

    mgr, config = _load_config_or_abort()
    store = StructureStore(JsonFileBackend(Path(config.storage.data_path)), config.defaults)
    return config, store


def _abort_on_error(fn):
    """StructureError → rote Meldung und Exit-Code 1."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except StructureError as e:
            console.print(f"[red bold]Fehler:[/red bold] {e}")
            sys.exit(1)
    return wrapper


def _confirm(yes: bool):
    """confirm-Callback für Kaskaden; --yes überspringt die Rückfrage."""
    def confirm(message: str) -> bool:
        return yes or click.confirm(message, default=False)
    return confirm


def _finish_cascade(result) -> None:
    result.print_rich()
    if result.status in ("partial", "failed"):
        sys.exit(1)


def _parse_semesters(raw: Optional[str]) -> Optional[list[int]]:
    if not raw:
        return None
    try:
        return [int(s) for s in raw.replace(";", ",").split(",") if s.strip()]
    except ValueError:
        raise click.BadParameter(f"'{raw}' ist keine Semester-Liste (z.B. 1,2)")


def _print_details(details, title: str) -> None:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Fachbereich", style="bold")
    table.add_column("Jahr", justify="right")
    table.add_column("Sem.", justify="right")
    table.add_column("Abschnitte")
    table.add_column("Fächer")
    table.add_column("Credits", justify="right")
    for d in details:
        table.add_row(
            d.department, str(d.year), str(d.semester),
            ", ".join(d.sections) or "[dim]—[/dim]",
            "\n".join(f"{i}. {s.token}" for i, s in enumerate(d.subjects, 1))
            or "[dim]—[/dim]",
            str(d.credits),
        )
    console.print(table)


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """Ersteinrichtung: Konfiguration mit dem Setup-Wizard anlegen."""
    from config.wizard import run_wizard
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]python main.py config edit[/bold] zum Bearbeiten."
        )
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    config = run_wizard()
    if config is not None:
        mgr.save(config)
        console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
        console.print("Führen Sie jetzt [bold]python main.py seed[/bold] "
                      "oder [bold]python main.py department add[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder bearbeiten."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort()

    console.print(Panel(
        f"[bold]{config.institution_name}[/bold]",
        title="Konfiguration",
        border_style="cyan",
    ))
    table = Table(box=box.ROUNDED)
    table.add_column("Bereich", style="bold cyan")
    table.add_column("Wert")
    table.add_row("Datendatei", config.storage.data_path)
    table.add_row("Quiz-Einstellungen", config.storage.quiz_settings_path)
    table.add_row("Default-Credits", str(config.defaults.default_credits))
    table.add_row("Default-Abschnitt", config.defaults.default_section)
    table.add_row("Semester pro Jahr",
                  ", ".join(str(s) for s in config.defaults.default_semesters))
    table.add_row("Log-Level", config.logging.level)
    console.print(table)


@cmd_config.command("edit")
def config_edit():
    """Bearbeitet die Konfiguration interaktiv."""
    mgr, config = _load_config_or_abort()
    mgr.edit_interactive(config)


# ─── DEPARTMENT ───────────────────────────────────────────────────────────────

@click.group("department")
def cmd_department():
    """Fachbereiche anlegen, bearbeiten, auflisten, löschen."""


@cmd_department.command("add")
@click.argument("name")
@click.argument("code")
@click.option("--description", "-d", default="", help="Beschreibung.")
@_abort_on_error
def department_add(name: str, code: str, description: str):
    """Legt einen Fachbereich an."""
    _, store = _open_store()
    dep = store.add_department(name, code, description)
    console.print(f"[green]✓[/green] Fachbereich angelegt: {dep.name} ({dep.code})")


@cmd_department.command("edit")
@click.argument("name")
@click.option("--name", "new_name", default=None, help="Neuer Name.")
@click.option("--code", default=None, help="Neues Kürzel.")
@click.option("--description", "-d", default=None, help="Neue Beschreibung.")
@_abort_on_error
def department_edit(name: str, new_name: Optional[str], code: Optional[str],
                    description: Optional[str]):
    """Ändert einen Fachbereich. Eine Umbenennung zieht die Studienabschnitte mit."""
    _, store = _open_store()
    dep = store.update_department(name, new_name=new_name, code=code,
                                  description=description)
    console.print(f"[green]✓[/green] Fachbereich gespeichert: {dep.name} ({dep.code})")


@cmd_department.command("list")
@_abort_on_error
def department_list():
    """Listet alle Fachbereiche auf."""
    _, store = _open_store()
    if not store.departments:
        console.print("[dim]Keine Fachbereiche vorhanden.[/dim]")
        return
    table = Table(title="Fachbereiche", box=box.ROUNDED)
    table.add_column("Name", style="bold")
    table.add_column("Kürzel")
    table.add_column("Beschreibung")
    table.add_column("Studienabschnitte", justify="right")
    for dep in store.departments:
        table.add_row(dep.name, dep.code, dep.description,
                      str(len(store.filter(department=dep.name))))
    console.print(table)


@cmd_department.command("delete")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, default=False, help="Ohne Rückfrage löschen.")
@_abort_on_error
def department_delete(name: str, yes: bool):
    """Löscht einen Fachbereich samt aller Studienabschnitte."""
    _, store = _open_store()
    _finish_cascade(store.delete_department(name, _confirm(yes)))


# ─── DETAIL ───────────────────────────────────────────────────────────────────

@click.group("detail")
def cmd_detail():
    """Studienabschnitte (Fachbereich × Jahr × Semester) verwalten."""


@cmd_detail.command("set")
@click.argument("department")
@click.argument("year", type=int)
@click.argument("semester", type=int)
@click.option("--sections", default=None, help="Abschnitte, z.B. 'A,B'.")
@click.option("--subjects", default=None,
              help="Fächer, z.B. 'Programming(CS101),Logic(CS102)'.")
@click.option("--credits", type=int, default=None, help="Credits des Studienabschnitts.")
@_abort_on_error
def detail_set(department: str, year: int, semester: int, sections: Optional[str],
               subjects: Optional[str], credits: Optional[int]):
    """Legt einen Studienabschnitt an oder ersetzt Abschnitte/Fächer/Credits."""
    from structure.codec import decode_sections_strict, decode_subjects_strict

    config, store = _open_store()
    patch: dict = {}
    if sections is not None:
        patch["sections"] = decode_sections_strict(sections)
    if subjects is not None:
        patch["subjects"] = decode_subjects_strict(
            subjects, credits or config.defaults.default_credits)
    if credits is not None:
        patch["credits"] = credits
    detail = store.upsert_academic_detail(department, year, semester, patch)
    console.print(f"[green]✓[/green] Studienabschnitt gespeichert: {detail.key.label()}")
    _print_details([detail], "Studienabschnitt")


@cmd_detail.command("list")
@click.option("--department", "-d", default=None, help="Filter Fachbereich.")
@click.option("--year", "-j", type=int, default=None, help="Filter Jahr.")
@click.option("--semester", "-s", type=int, default=None, help="Filter Semester.")
@_abort_on_error
def detail_list(department: Optional[str], year: Optional[int], semester: Optional[int]):
    """Listet Studienabschnitte auf (Filter werden UND-verknüpft)."""
    _, store = _open_store()
    details = store.filter(department, year, semester)
    if not details:
        console.print("[dim]Keine Studienabschnitte gefunden.[/dim]")
        return
    _print_details(details, "Studienabschnitte")


@cmd_detail.command("delete")
@click.argument("department")
@click.argument("year", type=int)
@click.argument("semester", type=int)
@_abort_on_error
def detail_delete(department: str, year: int, semester: int):
    """Löscht genau einen Studienabschnitt."""
    from models.academic_detail import DetailKey

    _, store = _open_store()
    key = DetailKey(department, year, semester)
    store.delete_academic_detail(key)
    console.print(f"[green]✓[/green] Studienabschnitt gelöscht: {key.label()}")


# ─── SECTION ──────────────────────────────────────────────────────────────────

@click.group("section")
def cmd_section():
    """Abschnitte eines Studienabschnitts pflegen."""


@cmd_section.command("add")
@click.argument("department")
@click.argument("year", type=int)
@click.argument("semester", type=int)
@click.argument("letter")
@_abort_on_error
def section_add(department: str, year: int, semester: int, letter: str):
    """Fügt einen Abschnitt hinzu (Kleinbuchstaben werden umgewandelt)."""
    _, store = _open_store()
    detail = store.add_section((department, year, semester), letter)
    console.print(f"[green]✓[/green] {detail.key.label()}: Abschnitte "
                  f"{', '.join(detail.sections)}")


@cmd_section.command("remove")
@click.argument("department")
@click.argument("year", type=int)
@click.argument("semester", type=int)
@click.argument("position", type=int)
@click.option("--expect", default=None, help="Erwarteter Buchstabe an dieser Position.")
@_abort_on_error
def section_remove(department: str, year: int, semester: int, position: int,
                   expect: Optional[str]):
    """Entfernt den Abschnitt an POSITION (1 = erster angezeigter Abschnitt)."""
    _, store = _open_store()
    detail = store.remove_section((department, year, semester), position - 1, expect)
    console.print(f"[green]✓[/green] {detail.key.label()}: Abschnitte "
                  f"{', '.join(detail.sections) or '—'}")


# ─── SUBJECT ──────────────────────────────────────────────────────────────────

@click.group("subject")
def cmd_subject():
    """Fächer eines Studienabschnitts pflegen."""


@cmd_subject.command("add")
@click.argument("department")
@click.argument("year", type=int)
@click.argument("semester", type=int)
@click.argument("name")
@click.argument("code")
@click.option("--credits", type=int, default=None, help="Credits des Fachs.")
@_abort_on_error
def subject_add(department: str, year: int, semester: int, name: str, code: str,
                credits: Optional[int]):
    """Fügt ein Fach hinzu; der Fachcode muss global eindeutig sein."""
    from models.subject import Subject

    _, store = _open_store()
    detail = store.add_or_update_subject(
        (department, year, semester), Subject(name=name, code=code, credits=credits))
    console.print(f"[green]✓[/green] {detail.key.label()}: "
                  f"{', '.join(s.token for s in detail.subjects)}")


@cmd_subject.command("edit")
@click.argument("department")
@click.argument("year", type=int)
@click.argument("semester", type=int)
@click.argument("original")
@click.argument("name")
@click.argument("code")
@click.option("--credits", type=int, default=None, help="Credits des Fachs.")
@_abort_on_error
def subject_edit(department: str, year: int, semester: int, original: str, name: str,
                 code: str, credits: Optional[int]):
    """Ersetzt das Fach ORIGINAL (z.B. 'Logic(CS102)') durch NAME/CODE."""
    from models.subject import Subject

    _, store = _open_store()
    detail = store.add_or_update_subject(
        (department, year, semester), Subject(name=name, code=code, credits=credits),
        editing_original_token=original,
    )
    console.print(f"[green]✓[/green] {detail.key.label()}: "
                  f"{', '.join(s.token for s in detail.subjects)}")


@cmd_subject.command("remove")
@click.argument("department")
@click.argument("year", type=int)
@click.argument("semester", type=int)
@click.argument("position", type=int)
@click.option("--expect", default=None, help="Erwarteter Fachcode an dieser Position.")
@_abort_on_error
def subject_remove(department: str, year: int, semester: int, position: int,
                   expect: Optional[str]):
    """Entfernt das Fach an POSITION (1 = erstes angezeigtes Fach)."""
    _, store = _open_store()
    detail = store.remove_subject((department, year, semester), position - 1, expect)
    console.print(f"[green]✓[/green] {detail.key.label()}: "
                  f"{', '.join(s.token for s in detail.subjects) or '—'}")


@cmd_subject.command("list")
@_abort_on_error
def subject_list():
    """Globales Fächerverzeichnis (Fachcode → Studienabschnitt)."""
    from structure.views import subject_registry

    _, store = _open_store()
    registry = subject_registry(store.details)
    if not registry:
        console.print("[dim]Keine Fächer vorhanden.[/dim]")
        return
    table = Table(title="Fächerverzeichnis", box=box.ROUNDED)
    table.add_column("Code", style="bold")
    table.add_column("Fach")
    table.add_column("Fachbereich")
    table.add_column("Jahr", justify="right")
    table.add_column("Sem.", justify="right")
    table.add_column("Credits", justify="right")
    for code, s in sorted(registry.items()):
        table.add_row(code, s.name, s.department, str(s.year), str(s.semester),
                      str(s.credits))
    console.print(table)


# ─── YEAR / SEMESTER ──────────────────────────────────────────────────────────

@click.group("year")
def cmd_year():
    """Jahre konfigurieren oder löschen."""


@cmd_year.command("configure")
@click.argument("year", type=int)
@click.option("--semesters", default=None, help="Semester, z.B. '1,2' (Default aus Config).")
@click.option("--department", "-d", default=None, help="Nur diesen Fachbereich.")
@_abort_on_error
def year_configure(year: int, semesters: Optional[str], department: Optional[str]):
    """Legt fehlende Studienabschnitte für ein Jahr an (Abschnitt aus Config)."""
    _, store = _open_store()
    created = store.configure_year(year, _parse_semesters(semesters), department)
    if not created:
        console.print(f"[dim]Jahr {year}: alles bereits vorhanden.[/dim]")
        return
    console.print(f"[green]✓[/green] Jahr {year}: {len(created)} Studienabschnitte angelegt")
    for d in created:
        console.print(f"  • {d.key.label()}")


@cmd_year.command("delete")
@click.argument("year", type=int)
@click.option("--department", "-d", default=None,
              help="Nur in diesem Fachbereich (sonst in allen).")
@click.option("--yes", "-y", is_flag=True, default=False, help="Ohne Rückfrage löschen.")
@_abort_on_error
def year_delete(year: int, department: Optional[str], yes: bool):
    """Löscht ein Jahr in allen Fachbereichen (oder nur in einem)."""
    _, store = _open_store()
    if department:
        result = store.delete_department_year(department, year, _confirm(yes))
    else:
        result = store.delete_year(year, _confirm(yes))
    _finish_cascade(result)


@click.group("semester")
def cmd_semester():
    """Semester löschen."""


@cmd_semester.command("delete")
@click.argument("year", type=int)
@click.argument("semester", type=int)
@click.option("--yes", "-y", is_flag=True, default=False, help="Ohne Rückfrage löschen.")
@_abort_on_error
def semester_delete(year: int, semester: int, yes: bool):
    """Löscht ein Semester eines Jahres in allen Fachbereichen."""
    _, store = _open_store()
    _finish_cascade(store.delete_semester(year, semester, _confirm(yes)))


# ─── STRUCTURE / CHECK ────────────────────────────────────────────────────────

@click.command("structure")
@_abort_on_error
def cmd_structure():
    """Zeigt den Strukturbaum Fachbereich → Jahr → Semester."""
    from structure.views import academic_structure

    config, store = _open_store()
    tree_data = academic_structure(store.details)
    tree = Tree(f"[bold]{config.institution_name}[/bold]")
    for dep in store.departments:
        dep_node = tree.add(f"[bold cyan]{dep.name}[/bold cyan] ({dep.code})")
        years = tree_data.get(dep.name, {"years": {}})["years"]
        for year, year_data in years.items():
            year_node = dep_node.add(f"Jahr {year}")
            for semester, sem in year_data["semesters"].items():
                subjects = ", ".join(f"{s['name']}({s['code']})" for s in sem["subjects"])
                year_node.add(
                    f"Semester {semester}: Abschnitte {', '.join(sem['sections']) or '—'}"
                    f"  [dim]{subjects}[/dim]"
                )
    console.print(tree)

    index = store.year_semester_index()
    if index:
        console.print("\n[bold]Jahre/Semester:[/bold] " + " | ".join(
            f"Jahr {y}: {', '.join(str(s) for s in sems)}" for y, sems in index.items()))


@click.command("check")
@_abort_on_error
def cmd_check():
    """Führt einen Konsistenz-Check auf dem Datenbestand durch."""
    _, store = _open_store()
    report = store.check()
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


# ─── IMPORT / TEMPLATE / SEED ─────────────────────────────────────────────────

@click.group("import")
def cmd_import():
    """Importiert Fachbereiche oder Studienabschnitte aus Excel/CSV."""


def _run_import(datei: Path, what: str) -> None:
    from data.excel_import import StructureImportError, import_departments, import_details

    _, store = _open_store()
    console.print(f"[bold]Importiere:[/bold] {datei}")
    try:
        if what == "departments":
            result = import_departments(datei, store)
        else:
            result = import_details(datei, store)
    except StructureImportError as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)
    result.print_rich()
    if not result.success:
        sys.exit(1)


@cmd_import.command("details")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@_abort_on_error
def import_details_cmd(datei: Path):
    """Studienabschnitte (Department, Year, Semester, Sections, Subjects, Credits)."""
    _run_import(datei, "details")


@cmd_import.command("departments")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@_abort_on_error
def import_departments_cmd(datei: Path):
    """Fachbereiche (Department Name, Department Code, Description)."""
    _run_import(datei, "departments")


@click.command("template")
@click.option("--output", "-o", default="output/import_vorlage.xlsx",
              help="Ausgabepfad für die Excel-Vorlage.")
def cmd_template(output: str):
    """Erzeugt eine Excel-Import-Vorlage."""
    from data.excel_import import generate_template

    out_path = Path(output)
    generate_template(out_path)
    console.print(f"[green]✓[/green] Vorlage gespeichert: {out_path}")
    console.print(
        "\nBlätter in der Vorlage:\n"
        "  [cyan]Departments[/cyan]       – Department Name, Department Code, Description\n"
        "  [cyan]Academic Details[/cyan]  – Department, Year, Semester, Sections, Subjects, Credits"
    )


@click.command("seed")
@_abort_on_error
def cmd_seed():
    """Legt Beispiel-Fachbereiche und -Studienabschnitte an."""
    from data.sample_data import SampleDataBuilder

    _, store = _open_store()
    builder = SampleDataBuilder(store)
    builder.build()
    builder.print_summary()


# ─── QUIZ-SETTINGS ────────────────────────────────────────────────────────────

@click.group("quiz-settings")
def cmd_quiz_settings():
    """Quiz-Sicherheitseinstellungen anzeigen oder ändern."""


@cmd_quiz_settings.command("show")
def quiz_settings_show():
    """Zeigt die aktuellen Quiz-Einstellungen an."""
    mgr, config = _load_config_or_abort()
    settings = mgr.load_quiz_settings(Path(config.storage.quiz_settings_path))
    table = Table(title="Quiz-Einstellungen", box=box.ROUNDED)
    table.add_column("Bereich", style="bold cyan")
    table.add_column("Feld")
    table.add_column("Wert")
    for section, values in settings.model_dump().items():
        if not isinstance(values, dict):
            table.add_row(section, "", str(values))
            continue
        for key, value in values.items():
            table.add_row(section, key, str(value))
    console.print(table)


@cmd_quiz_settings.command("set")
@click.argument("assignments", nargs=-1, required=True)
def quiz_settings_set(assignments: tuple[str, ...]):
    """Setzt Werte, z.B. violation_settings.max_violations=8."""
    mgr, config = _load_config_or_abort()
    path = Path(config.storage.quiz_settings_path)
    patch: dict = {}
    for assignment in assignments:
        dotted, sep, raw = assignment.partition("=")
        if not sep or not dotted.strip():
            raise click.BadParameter(f"'{assignment}' (erwartet: bereich.feld=wert)")
        target = patch
        *parents, leaf = dotted.strip().split(".")
        for part in parents:
            target = target.setdefault(part, {})
        target[leaf] = raw.strip()

    try:
        settings = mgr.load_quiz_settings(path).merged(patch)
    except ValueError as e:
        console.print(f"[red bold]Ungültige Quiz-Einstellungen:[/red bold]\n{e}")
        sys.exit(1)
    mgr.save_quiz_settings(settings, path)
    console.print(f"[green]✓[/green] Quiz-Einstellungen gespeichert: {path}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log-Ausgabe aktivieren.")
def cli(verbose: bool):
    """Studienstruktur: Fachbereiche, Jahre, Semester, Abschnitte und Fächer.

    Starten Sie mit: python main.py setup
    """
    level = logging.WARNING
    if verbose:
        from config.manager import ConfigManager
        mgr = ConfigManager()
        level = logging.INFO
        if not mgr.first_run_check():
            level = getattr(logging, mgr.load().logging.level)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main():
    """Einstiegspunkt. Startet automatisch den Wizard beim ersten Aufruf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen bei der Strukturverwaltung![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Der Setup-Wizard wird jetzt gestartet...",
            border_style="cyan",
        ))
        sys.argv.append("setup")

    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_department)
cli.add_command(cmd_detail)
cli.add_command(cmd_section)
cli.add_command(cmd_subject)
cli.add_command(cmd_year)
cli.add_command(cmd_semester)
cli.add_command(cmd_structure)
cli.add_command(cmd_check)
cli.add_command(cmd_import)
cli.add_command(cmd_template)
cli.add_command(cmd_seed)
cli.add_command(cmd_quiz_settings)


if __name__ == "__main__":
    main()
