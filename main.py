"""Stundenplan-Engine: Haupt-CLI.

Verwendung:
  python main.py setup                    Standard-Konfiguration anlegen
  python main.py config show              Konfiguration anzeigen
  python main.py generate                 Beispieldaten → Plan → Validierung
  python main.py generate --classes 3     Mehrklassen-Modus
  python main.py generate --excel out.xlsx
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_config_or_abort(path: Optional[Path] = None):
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if path is None and mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus."
        )
        sys.exit(1)
    try:
        return mgr, mgr.load(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red bold]Konfiguration nicht ladbar:[/red bold]\n{e}")
        sys.exit(1)


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Konfiguration überschreiben.")
def cmd_setup(force: bool):
    """Ersteinrichtung: Standard-Konfiguration als YAML anlegen."""
    from config.defaults import default_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Mit [bold]--force[/bold] wird sie überschrieben."
        )
        return

    mgr.save(default_config())
    console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
    console.print("Führen Sie jetzt [bold]python main.py generate[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Alternative Konfigurationsdatei.")
def config_show(config_path: Optional[Path]):
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort(config_path)

    tg = config.time_grid
    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  "
        f"{len(tg.day_names)} Tage × {tg.periods_per_day} Stunden ({tg.slot_count} Slots)",
        title="Konfiguration",
        border_style="cyan",
    ))

    table = Table(title="Zeitraster", box=box.ROUNDED)
    table.add_column("Nr.")
    table.add_column("Tag")
    for idx, day in enumerate(tg.day_names, 1):
        table.add_row(str(idx), day)
    console.print(table)

    vc = config.validation
    console.print(
        f"\n[bold]Scheduler:[/bold] max. {config.scheduler.max_passes} Durchläufe\n"
        f"[bold]Validierung:[/bold] Verteilungs-Faktor {vc.distribution_factor} | "
        f"Auslastung σ ≤ {vc.workload_stddev_limit} | "
        f"schwere Fächer ab {vc.difficult_subject_min_lectures}h | "
        f"Folge ab {vc.consecutive_run_length} Stunden"
    )


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--classes", "num_classes", default=0, type=click.IntRange(min=0),
              help="Anzahl Klassen (0 = Einzelklassen-Modus).")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Alternative Konfigurationsdatei.")
@click.option("--excel", "excel_path", type=click.Path(path_type=Path), default=None,
              help="Stundenplan zusätzlich als Excel-Datei speichern.")
@click.option("--json-path", type=click.Path(path_type=Path), default=None,
              help="Stammdaten als JSON speichern.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug-Ausgaben.")
def cmd_generate(
    seed: int,
    num_classes: int,
    config_path: Optional[Path],
    excel_path: Optional[Path],
    json_path: Optional[Path],
    verbose: bool,
):
    """Erzeugt Beispieldaten, generiert den Plan und validiert ihn."""
    _setup_logging(verbose)
    mgr, config = _load_config_or_abort(config_path)

    from data.sample_data import SampleDataGenerator
    from solver.engine import TimetableEngine
    from analysis.quality_report import QualityAnalyzer
    from export.tui_renderer import render_class_rows

    gen = SampleDataGenerator(config, seed=seed, num_classes=num_classes)
    data = gen.generate()
    gen.print_summary(data)
    data.validate_feasibility().print_rich()

    if json_path is not None:
        data.save_json(json_path)
        console.print(f"[green]✓[/green] Stammdaten gespeichert: {json_path}")

    engine = TimetableEngine.from_data(data)
    for result in engine.generate_all():
        if not result.ok:
            console.print(f"[red bold]Generierung fehlgeschlagen:[/red bold] {result.message}")
            sys.exit(1)

    for class_id in engine.class_scopes:
        title = f"Klasse {class_id}" if class_id is not None else "Stundenplan"
        table = Table(title=title, box=box.ROUNDED, show_lines=True)
        table.add_column("Std.", justify="right")
        for day in config.time_grid.day_names:
            table.add_column(day)
        for row in render_class_rows(engine, class_id):
            table.add_row(*row)
        console.print(table)

    engine.report().print_rich()

    analyzer = QualityAnalyzer()
    stats = analyzer.analyze(
        engine.entries, engine.subjects, engine.teachers,
        config.time_grid, engine.classes,
    )
    analyzer.print_rich(stats, engine.teachers)

    if excel_path is not None:
        from export.excel_export import ExcelExporter
        ExcelExporter(engine).export(excel_path)
        console.print(f"[green]✓[/green] Excel gespeichert: {excel_path}")

    sys.exit(1 if engine.has_errors else 0)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
def cli():
    """Stundenplan-Engine: Greedy-Generierung und Regel-Validierung.

    Starten Sie mit: python main.py setup
    """


def main():
    """Einstiegspunkt."""
    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_generate)


if __name__ == "__main__":
    main()
