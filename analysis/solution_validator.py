"""Regel-basierte Validierung des Stundenplans.

Berechnet die komplette Befundliste bei jedem Aufruf neu (keine
inkrementelle Pflege). Reine Funktion des Zustands: Eingaben werden nicht
verändert, unbekannte Fach-/Lehrer-Referenzen werden übersprungen.
"""

from collections import defaultdict
from typing import Optional

from pydantic import BaseModel

from config.schema import TimeGridConfig, ValidationConfig
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher
from models.timetable_entry import TimetableEntry
from models.validation_issue import ValidationIssue
from analysis.scoring import (
    difficult_subject_days, distribution_score, subject_day_counts,
    teacher_workload_stddev,
)


class ValidationReport(BaseModel):
    """Ergebnis eines Validierungs-Durchlaufs."""

    issues: list[ValidationIssue]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ FEHLER GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}"]
        console.print(Panel("\n".join(lines), title="Stundenplan-Validierung", border_style="cyan"))

        if not self.issues:
            console.print("[dim]Keine Befunde.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=26)
        table.add_column("Beschreibung")

        for issue in self.issues:
            color = "red" if issue.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{issue.severity.upper()}[/{color}]",
                issue.rule,
                issue.message,
            )
        console.print(table)


class _Scope:
    """Klassen-Bereich: eigene Einträge, eigenes Raster."""

    def __init__(self, class_id: Optional[str], name: Optional[str],
                 entries: list[TimetableEntry]) -> None:
        self.class_id = class_id
        self.entries = entries
        self.prefix = f"[{name}] " if name else ""
        self.key: tuple[str, ...] = (class_id,) if class_id is not None else ()


class ValidationEngine:
    """Prüft einen Stundenplan auf harte Verletzungen und Qualitätsmängel.

    Regeln (in fester Reihenfolge):
      1. Stundenzahl pro Fach (error)
      2. Max. 1 Stunde pro Tag für Fächer mit ≤ Anzahl Tage Wochenstunden (warning)
      3. Lehrer-Doppelbuchung (error)
      4. Klassen-Slot doppelt belegt (error)
      5. Lehrer-Verfügbarkeit (error)
      6. Gleiches Fach mehrfach in Folge (warning)
      7. Ungenutzte Slots bei fehlenden Stunden (warning)
      8. Verbesserungs-Hinweise: Verteilung, Auslastung, schwere Fächer (warning)
    """

    def __init__(self, config: Optional[ValidationConfig] = None) -> None:
        self.config = config or ValidationConfig()

    def validate(
        self,
        entries: list[TimetableEntry],
        subjects: list[Subject],
        teachers: list[Teacher],
        time_grid: TimeGridConfig,
        classes: Optional[list[SchoolClass]] = None,
    ) -> list[ValidationIssue]:
        """Führt alle Regeln aus und gibt die geordnete Befundliste zurück."""
        scopes = self._build_scopes(entries, classes)
        issues: list[ValidationIssue] = []

        for scope in scopes:
            issues.extend(self._check_lecture_counts(scope, subjects))
            issues.extend(self._check_daily_subject_cap(scope, subjects, time_grid))
        issues.extend(self._check_teacher_double_booking(entries, teachers, time_grid))
        for scope in scopes:
            issues.extend(self._check_slot_double_booking(scope, subjects))
        issues.extend(self._check_teacher_availability(entries, teachers, time_grid))
        for scope in scopes:
            issues.extend(self._check_consecutive_subjects(scope, subjects, time_grid))
        for scope in scopes:
            issues.extend(self._check_empty_slots(scope, subjects, time_grid))
        issues.extend(self._check_suggestions(scopes, entries, subjects, teachers, time_grid))

        return issues

    def report(
        self,
        entries: list[TimetableEntry],
        subjects: list[Subject],
        teachers: list[Teacher],
        time_grid: TimeGridConfig,
        classes: Optional[list[SchoolClass]] = None,
    ) -> ValidationReport:
        """Wie validate(), verpackt als ValidationReport."""
        issues = self.validate(entries, subjects, teachers, time_grid, classes)
        has_errors = any(i.severity == "error" for i in issues)
        return ValidationReport(issues=issues, is_valid=not has_errors)

    # ── Hilfen ───────────────────────────────────────────────────────────────

    @staticmethod
    def _build_scopes(
        entries: list[TimetableEntry], classes: Optional[list[SchoolClass]]
    ) -> list[_Scope]:
        if not classes:
            return [_Scope(None, None, list(entries))]
        by_class: dict[str, list[TimetableEntry]] = defaultdict(list)
        for e in entries:
            if e.class_id is not None:
                by_class[e.class_id].append(e)
        return [_Scope(c.id, c.name, by_class.get(c.id, [])) for c in classes]

    @staticmethod
    def _slot_sort_key(time_grid: TimeGridConfig):
        return lambda e: (time_grid.day_index(e.day), e.period)

    @staticmethod
    def _lecture_counts(scope: _Scope, subjects: list[Subject]) -> dict[str, int]:
        counts = {s.id: 0 for s in subjects}
        for e in scope.entries:
            if e.subject_id in counts:
                counts[e.subject_id] += 1
        return counts

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_lecture_counts(
        self, scope: _Scope, subjects: list[Subject]
    ) -> list[ValidationIssue]:
        """Ist-Stunden pro Fach müssen dem Wochen-Soll entsprechen."""
        issues: list[ValidationIssue] = []
        counts = self._lecture_counts(scope, subjects)

        for subject in subjects:
            got = counts[subject.id]
            if got < subject.weekly_lectures:
                issues.append(ValidationIssue(
                    rule="insufficient_lectures",
                    severity="error",
                    entities=scope.key + (subject.id,),
                    message=(
                        f"{scope.prefix}{subject.name} hat nur {got} von "
                        f"{subject.weekly_lectures} geforderten Stunden."
                    ),
                ))
            elif got > subject.weekly_lectures:
                issues.append(ValidationIssue(
                    rule="excess_lectures",
                    severity="error",
                    entities=scope.key + (subject.id,),
                    message=(
                        f"{scope.prefix}{subject.name} hat {got} Stunden, "
                        f"gefordert sind nur {subject.weekly_lectures}."
                    ),
                ))
        return issues

    def _check_daily_subject_cap(
        self, scope: _Scope, subjects: list[Subject], time_grid: TimeGridConfig
    ) -> list[ValidationIssue]:
        """Fächer mit wenigen Wochenstunden höchstens einmal pro Tag."""
        issues: list[ValidationIssue] = []
        days = time_grid.day_names

        for subject in subjects:
            if subject.weekly_lectures > len(days):
                continue
            counts = subject_day_counts(scope.entries, subject.id, days)
            for day in days:
                if counts[day] > 1:
                    issues.append(ValidationIssue(
                        rule="daily_subject_cap",
                        severity="warning",
                        entities=scope.key + (subject.id, day),
                        message=(
                            f"{scope.prefix}{subject.name} hat {counts[day]} Stunden "
                            f"am {day}, empfohlen ist höchstens 1."
                        ),
                    ))
        return issues

    def _check_teacher_double_booking(
        self,
        entries: list[TimetableEntry],
        teachers: list[Teacher],
        time_grid: TimeGridConfig,
    ) -> list[ValidationIssue]:
        """Kein Lehrer darf zur selben Zeit zweimal eingeplant sein (klassenübergreifend)."""
        issues: list[ValidationIssue] = []
        by_teacher: dict[str, dict[tuple, list[TimetableEntry]]] = defaultdict(
            lambda: defaultdict(list)
        )
        for e in sorted(entries, key=self._slot_sort_key(time_grid)):
            by_teacher[e.teacher_id][(e.day, e.period)].append(e)

        for teacher in teachers:
            for (day, period), booked in by_teacher.get(teacher.id, {}).items():
                if len(booked) < 2:
                    continue
                # Ein Befund pro überzähligem Eintrag
                for extra in booked[1:]:
                    issues.append(ValidationIssue(
                        rule="teacher_double_booked",
                        severity="error",
                        entities=(teacher.id, day, str(period), extra.id),
                        message=(
                            f"{teacher.name} ist am {day} in Stunde {period} "
                            f"doppelt gebucht."
                        ),
                    ))
        return issues

    def _check_slot_double_booking(
        self, scope: _Scope, subjects: list[Subject]
    ) -> list[ValidationIssue]:
        """Eine Klasse darf pro Slot nur einen Eintrag haben."""
        issues: list[ValidationIssue] = []
        subject_names = {s.id: s.name for s in subjects}
        by_slot: dict[tuple, list[TimetableEntry]] = defaultdict(list)
        for e in scope.entries:
            by_slot[(e.day, e.period)].append(e)

        for (day, period), booked in by_slot.items():
            if len(booked) < 2:
                continue
            names = [subject_names.get(e.subject_id, e.subject_id) for e in booked]
            for extra in booked[1:]:
                issues.append(ValidationIssue(
                    rule="slot_double_booked",
                    severity="error",
                    entities=scope.key + (day, str(period), extra.id),
                    message=(
                        f"{scope.prefix}{day}, Stunde {period}: mehrere Einträge "
                        f"({', '.join(names)})."
                    ),
                ))
        return issues

    def _check_teacher_availability(
        self,
        entries: list[TimetableEntry],
        teachers: list[Teacher],
        time_grid: TimeGridConfig,
    ) -> list[ValidationIssue]:
        """Kein Lehrer darf außerhalb seiner verfügbaren Slots eingeplant sein."""
        issues: list[ValidationIssue] = []
        ordered = sorted(entries, key=self._slot_sort_key(time_grid))

        for teacher in teachers:
            for e in ordered:
                if e.teacher_id != teacher.id:
                    continue
                if teacher.is_available(e.day, e.period):
                    continue
                issues.append(ValidationIssue(
                    rule="teacher_unavailable",
                    severity="error",
                    entities=(teacher.id, e.day, str(e.period), e.id),
                    message=(
                        f"{teacher.name} ist am {e.day} in Stunde {e.period} "
                        f"nicht verfügbar."
                    ),
                ))
        return issues

    def _check_consecutive_subjects(
        self, scope: _Scope, subjects: list[Subject], time_grid: TimeGridConfig
    ) -> list[ValidationIssue]:
        """Lange Folgen desselben Fachs an einem Tag vermeiden."""
        issues: list[ValidationIssue] = []
        subject_map = {s.id: s for s in subjects}
        min_run = self.config.consecutive_run_length

        for day in time_grid.day_names:
            day_entries = sorted(
                (e for e in scope.entries if e.day == day), key=lambda e: e.period
            )
            run_start = 0
            for i in range(1, len(day_entries) + 1):
                continues = (
                    i < len(day_entries)
                    and day_entries[i].subject_id == day_entries[i - 1].subject_id
                    and day_entries[i].period == day_entries[i - 1].period + 1
                )
                if continues:
                    continue
                run_length = i - run_start
                first = day_entries[run_start]
                subject = subject_map.get(first.subject_id)
                if run_length >= min_run and subject is not None:
                    issues.append(ValidationIssue(
                        rule="consecutive_subject",
                        severity="warning",
                        entities=scope.key + (subject.id, day, str(first.period)),
                        message=(
                            f"{scope.prefix}{subject.name} hat am {day} {run_length} "
                            f"Stunden in Folge (ab Stunde {first.period})."
                        ),
                    ))
                run_start = i
        return issues

    def _check_empty_slots(
        self, scope: _Scope, subjects: list[Subject], time_grid: TimeGridConfig
    ) -> list[ValidationIssue]:
        """Freie Slots melden, solange noch Fächer unter Soll liegen."""
        occupied = {
            (e.day, e.period) for e in scope.entries
            if time_grid.contains(e.day, e.period)
        }
        empty = time_grid.slot_count - len(occupied)
        if empty <= 0:
            return []

        counts = self._lecture_counts(scope, subjects)
        if not any(counts[s.id] < s.weekly_lectures for s in subjects):
            return []

        return [ValidationIssue(
            rule="empty_slots",
            severity="warning",
            entities=scope.key,
            message=(
                f"{scope.prefix}{empty} freie Slots könnten für Fächer mit "
                f"fehlenden Stunden genutzt werden."
            ),
        )]

    def _check_suggestions(
        self,
        scopes: list[_Scope],
        entries: list[TimetableEntry],
        subjects: list[Subject],
        teachers: list[Teacher],
        time_grid: TimeGridConfig,
    ) -> list[ValidationIssue]:
        """Verbesserungs-Hinweise aus Verteilungs- und Auslastungs-Kennzahlen."""
        issues: list[ValidationIssue] = []
        cfg = self.config
        days = time_grid.day_names
        threshold = len(subjects) * cfg.distribution_factor

        for scope in scopes:
            score = distribution_score(scope.entries, subjects, days)
            if score < threshold:
                issues.append(ValidationIssue(
                    rule="distribution_suggestion",
                    severity="warning",
                    entities=scope.key,
                    message=(
                        f"{scope.prefix}Fächerverteilung über die Woche ist "
                        f"verbesserungswürdig (Score {score:.2f} < {threshold:.2f})."
                    ),
                ))

        workload = teacher_workload_stddev(entries, teachers)
        if workload > cfg.workload_stddev_limit:
            issues.append(ValidationIssue(
                rule="workload_suggestion",
                severity="warning",
                entities=(),
                message=(
                    f"Lehrer-Auslastung ist unausgewogen (Standardabweichung "
                    f"{workload:.2f} > {cfg.workload_stddev_limit:.2f})."
                ),
            ))

        for scope in scopes:
            clustered = difficult_subject_days(
                scope.entries, subjects, days, cfg.difficult_subject_min_lectures
            )
            for day, count in clustered:
                issues.append(ValidationIssue(
                    rule="difficult_subject_cluster",
                    severity="warning",
                    entities=scope.key + (day,),
                    message=(
                        f"{scope.prefix}{day}: hohe Konzentration schwerer Fächer "
                        f"({count} Stunden) – Verteilung prüfen."
                    ),
                ))
        return issues


def validate(
    entries: list[TimetableEntry],
    subjects: list[Subject],
    teachers: list[Teacher],
    time_grid: TimeGridConfig,
    classes: Optional[list[SchoolClass]] = None,
    config: Optional[ValidationConfig] = None,
) -> list[ValidationIssue]:
    """Kurzform für ValidationEngine(config).validate(...)."""
    return ValidationEngine(config).validate(entries, subjects, teachers, time_grid, classes)
