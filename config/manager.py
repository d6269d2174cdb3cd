"""Konfigurationsmanager: Laden, Speichern, Validieren und interaktives Bearbeiten.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren. Neben der
AppConfig verwaltet er die Quiz-Sicherheitseinstellungen in einer eigenen Datei.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import AppConfig, StructureDefaults
from models.quiz_settings import QuizSettings

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Studienstruktur: Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "storage": (
        "Speicher",
        "JSON-Datei für Fachbereiche und Studienabschnitte.",
    ),
    "defaults": (
        "Vorgaben",
        "Gelten für neu angelegte Studienabschnitte und Jahres-Konfigurationen.",
    ),
    "logging": (
        "Logging",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "app_config.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py setup' aus, um die Hochschule einzurichten."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return AppConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    # ─── Speichern ───

    def save(self, config: AppConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: AppConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "defaults" in cm:
            defaults_map = CommentedMap(cm["defaults"])
            defaults_map.yaml_add_eol_comment("Gilt für Fächer ohne eigene Credits",
                                              "default_credits")
            cm["defaults"] = defaults_map

        return cm

    # ─── Quiz-Einstellungen ───

    def load_quiz_settings(self, path: Path) -> QuizSettings:
        """Lädt die Quiz-Einstellungen; fehlt die Datei, gelten die Defaults."""
        if not path.exists():
            return QuizSettings()
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return QuizSettings.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Quiz-Einstellungen ungültig: {path}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    def save_quiz_settings(self, settings: QuizSettings, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        raw = json.loads(settings.model_dump_json())
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(CommentedMap(raw), f)
        console.print(f"[green]✓[/green] Quiz-Einstellungen gespeichert: {path}")

    # ─── Interaktives Bearbeiten ───

    def edit_interactive(self, config: AppConfig) -> AppConfig:
        """Interaktives Bearbeitungsmenü für die Konfiguration."""
        while True:
            console.print()
            console.print(Panel(
                "[bold]Konfiguration bearbeiten[/bold]",
                border_style="cyan",
            ))
            console.print("  [bold]1.[/bold] Name der Hochschule")
            console.print("  [bold]2.[/bold] Vorgaben (Credits, Abschnitt, Semester)")
            console.print("  [bold]3.[/bold] Datendatei")
            console.print("  [bold]0.[/bold] Speichern & Zurück")

            choice = Prompt.ask("\nAuswahl", default="0")

            if choice == "1":
                name = Prompt.ask("Name der Hochschule", default=config.institution_name)
                config = config.model_copy(update={"institution_name": name})
            elif choice == "2":
                config = config.model_copy(
                    update={"defaults": self._edit_defaults(config.defaults)}
                )
            elif choice == "3":
                path = Prompt.ask("Pfad zur JSON-Datei", default=config.storage.data_path)
                storage = config.storage.model_copy(update={"data_path": path})
                config = config.model_copy(update={"storage": storage})
            elif choice == "0":
                self.save(config)
                break
            else:
                console.print("[yellow]Ungültige Auswahl.[/yellow]")

        return config

    def _edit_defaults(self, defaults: StructureDefaults) -> StructureDefaults:
        """Vorgaben interaktiv anpassen."""
        credits = IntPrompt.ask("Default-Credits", default=defaults.default_credits)
        section = Prompt.ask("Default-Abschnitt", default=defaults.default_section)
        raw = Prompt.ask(
            "Semester pro Jahr (kommagetrennt)",
            default=",".join(str(s) for s in defaults.default_semesters),
        )
        try:
            semesters = [int(s) for s in raw.replace(";", ",").split(",") if s.strip()]
            return StructureDefaults(default_credits=credits, default_section=section,
                                     default_semesters=semesters)
        except ValueError as e:
            console.print(f"[red]Ungültige Eingabe:[/red] {e}")
            return defaults
