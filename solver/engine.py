"""TimetableEngine – besitzt Stammdaten, Einträge und Befundliste.

Alle Lese- und Schreibzugriffe laufen über die Methoden der Engine.
Jede erfolgreiche Änderung wahrt die harten Constraints:
  1. Kein Slot einer Klasse doppelt belegt
  2. Keine Lehrkraft zur selben Zeit doppelt gebucht (klassenübergreifend)
  3. Jeder Eintrag liegt in einem verfügbaren Slot seiner Lehrkraft
und löst anschließend einen vollständigen Validierungs-Durchlauf aus.

Die Engine ist nicht thread-safe: Aufrufer serialisieren
"ändern + validieren" selbst.
"""

import logging
from typing import Optional

from config.schema import TimetableConfig
from models.school_class import SchoolClass
from models.school_data import TimetableData
from models.subject import Subject
from models.teacher import Teacher
from models.timetable_entry import TimetableEntry
from models.validation_issue import ValidationIssue
from analysis.solution_validator import ValidationEngine, ValidationReport
from solver.outcomes import MutationResult, RejectionReason, SchedulingError
from solver.scheduler import GreedyScheduler, ScheduleSolution

logger = logging.getLogger(__name__)


class TimetableEngine:
    """Zentrale Engine für Generierung, Bearbeitung und Validierung.

    Verwendung:
        engine = TimetableEngine(config, subjects, teachers)
        engine.generate()
        result = engine.add_entry("MA", "SMI", "Monday", 3)
        for issue in engine.issues: ...
    """

    def __init__(
        self,
        config: TimetableConfig,
        subjects: list[Subject],
        teachers: list[Teacher],
        classes: Optional[list[SchoolClass]] = None,
    ) -> None:
        self.config = config
        self._subjects: list[Subject] = list(subjects)
        self._teachers: list[Teacher] = list(teachers)
        self._classes: list[SchoolClass] = list(classes or [])
        self._entries: list[TimetableEntry] = []
        self._issues: list[ValidationIssue] = []
        self._validator = ValidationEngine(config.validation)
        self.last_solution: Optional[ScheduleSolution] = None

    @classmethod
    def from_data(cls, data: TimetableData) -> "TimetableEngine":
        """Erzeugt eine Engine aus einem Stammdaten-Satz."""
        return cls(data.config, data.subjects, data.teachers, data.classes)

    # ─── Zustand (nur lesend) ─────────────────────────────────────────────────

    @property
    def subjects(self) -> list[Subject]:
        return list(self._subjects)

    @property
    def teachers(self) -> list[Teacher]:
        return list(self._teachers)

    @property
    def classes(self) -> list[SchoolClass]:
        return list(self._classes)

    @property
    def entries(self) -> list[TimetableEntry]:
        """Kopien der Einträge; Änderungen nur über die Engine-Methoden."""
        return [e.model_copy() for e in self._entries]

    @property
    def issues(self) -> list[ValidationIssue]:
        return list(self._issues)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self._issues if i.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self._issues if i.severity == "warning"]

    @property
    def has_errors(self) -> bool:
        return any(i.severity == "error" for i in self._issues)

    @property
    def class_scopes(self) -> list[Optional[str]]:
        """Alle Klassen-Bereiche; [None] im Einzelklassen-Modus."""
        return [c.id for c in self._classes] or [None]

    # ─── Abfragen ─────────────────────────────────────────────────────────────

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        return next((s for s in self._subjects if s.id == subject_id), None)

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return next((t for t in self._teachers if t.id == teacher_id), None)

    def get_entry(self, entry_id: str) -> Optional[TimetableEntry]:
        entry = self._find(entry_id)
        return entry.model_copy() if entry else None

    def entry_at(
        self, day: str, period: int, class_id: Optional[str] = None
    ) -> Optional[TimetableEntry]:
        """Eintrag im Slot (day, period) des Klassen-Bereichs, falls vorhanden."""
        for e in self._entries:
            if e.day == day and e.period == period and self._same_scope(e.class_id, class_id):
                return e.model_copy()
        return None

    def is_slot_occupied(self, day: str, period: int, class_id: Optional[str] = None) -> bool:
        return self.entry_at(day, period, class_id) is not None

    def is_teacher_available(self, teacher_id: str, day: str, period: int) -> bool:
        teacher = self.get_teacher(teacher_id)
        return teacher is not None and teacher.is_available(day, period)

    def entries_for_teacher(self, teacher_id: str) -> list[TimetableEntry]:
        return [e.model_copy() for e in self._entries if e.teacher_id == teacher_id]

    def entries_for_subject(self, subject_id: str) -> list[TimetableEntry]:
        return [e.model_copy() for e in self._entries if e.subject_id == subject_id]

    def entries_for_class(self, class_id: Optional[str]) -> list[TimetableEntry]:
        return [e.model_copy() for e in self._entries if self._same_scope(e.class_id, class_id)]

    # ─── Validierung ──────────────────────────────────────────────────────────

    def validate(self) -> list[ValidationIssue]:
        """Verwirft die alte Befundliste und berechnet sie vollständig neu."""
        self._issues = self._validator.validate(
            self._entries,
            self._subjects,
            self._teachers,
            self.config.time_grid,
            self._classes or None,
        )
        return list(self._issues)

    def report(self) -> ValidationReport:
        """Aktuelle Befundliste als ValidationReport (ohne Neuberechnung)."""
        return ValidationReport(issues=self.issues, is_valid=not self.has_errors)

    # ─── Generierung ──────────────────────────────────────────────────────────

    def generate(self, class_id: Optional[str] = None) -> MutationResult:
        """Ersetzt die Einträge eines Klassen-Bereichs durch einen Greedy-Plan.

        Einträge anderer Klassen bleiben erhalten; deren Lehrer-Belegung wird
        beim Platzieren respektiert.
        """
        unknown = self._unknown_class(class_id)
        if unknown is not None:
            return unknown
        scheduler = GreedyScheduler(self.config.time_grid, self.config.scheduler)
        others = [e for e in self._entries if not self._same_scope(e.class_id, class_id)]
        try:
            solution = scheduler.solve(
                self._subjects,
                self._teachers,
                class_id=class_id,
                existing_entries=others,
            )
        except SchedulingError as e:
            logger.info(f"Generierung abgelehnt: {e}")
            return MutationResult.rejected(e.reason, str(e))

        self._entries = others + solution.entries
        self.last_solution = solution
        logger.info(
            f"Stundenplan generiert{self._scope_label(class_id)}: "
            f"{len(solution.entries)} Einträge, "
            f"{sum(solution.shortfall.values())}h offen"
        )
        self.validate()
        return MutationResult.success(
            message=f"{len(solution.entries)} Einträge erzeugt."
        )

    def generate_all(self) -> list[MutationResult]:
        """Generiert nacheinander alle Klassen-Bereiche."""
        for class_id in self.class_scopes:
            self._entries = [
                e for e in self._entries if not self._same_scope(e.class_id, class_id)
            ]
        return [self.generate(class_id) for class_id in self.class_scopes]

    def reset(self) -> None:
        """Löscht alle Einträge und Befunde."""
        self._entries = []
        self._issues = []
        self.last_solution = None

    # ─── Stammdaten ersetzen ──────────────────────────────────────────────────

    def replace_subjects(self, subjects: list[Subject]) -> None:
        self._subjects = list(subjects)

    def replace_teachers(self, teachers: list[Teacher]) -> None:
        self._teachers = list(teachers)

    def replace_classes(self, classes: list[SchoolClass]) -> None:
        self._classes = list(classes)

    # ─── Änderungen ───────────────────────────────────────────────────────────

    def add_entry(
        self,
        subject_id: str,
        teacher_id: str,
        day: str,
        period: int,
        class_id: Optional[str] = None,
    ) -> MutationResult:
        """Fügt einen Eintrag hinzu, sofern alle harten Constraints halten.

        Prüfreihenfolge: Raster, Klasse, Fach, SLOT_OCCUPIED, TEACHER_UNAVAILABLE,
        TEACHER_DOUBLE_BOOKED. Gemeldet wird die erste Verletzung.
        """
        if not self.config.time_grid.contains(day, period):
            return self._reject(
                RejectionReason.INVALID_SLOT,
                f"Slot {day} {period}. liegt außerhalb des Rasters.",
            )
        unknown = self._unknown_class(class_id)
        if unknown is not None:
            return unknown
        subject = self.get_subject(subject_id)
        if subject is None:
            return self._reject(
                RejectionReason.UNKNOWN_SUBJECT, f"Unbekanntes Fach: {subject_id}"
            )
        occupant = self._occupant(day, period, class_id)
        if occupant is not None:
            return self._reject(
                RejectionReason.SLOT_OCCUPIED,
                f"Slot {day} {period}.{self._scope_label(class_id)} ist bereits belegt.",
            )
        blocked = self._teacher_conflict(teacher_id, day, period)
        if blocked is not None:
            return blocked

        entry = TimetableEntry(
            subject_id=subject.id,
            teacher_id=teacher_id,
            day=day,
            period=period,
            class_id=class_id,
        )
        self._entries.append(entry)
        logger.debug(f"Eintrag {entry.id} angelegt: {subject.id}/{teacher_id} {day} {period}.")
        self.validate()
        return MutationResult.success(entry.id)

    def remove_entry(self, entry_id: str) -> bool:
        """Entfernt einen Eintrag. False wenn er nicht existiert."""
        entry = self._find(entry_id)
        if entry is None:
            logger.info(f"Entfernen ignoriert: Eintrag {entry_id} nicht gefunden")
            return False
        self._entries.remove(entry)
        self.validate()
        return True

    def update_entry(
        self,
        entry_id: str,
        subject_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> MutationResult:
        """Ersetzt Fach und/oder Lehrkraft; Tag und Stunde bleiben unverändert.

        Eine neue Lehrkraft wird sofort auf Verfügbarkeit und Doppelbuchung
        im bestehenden Slot geprüft.
        """
        entry = self._find(entry_id)
        if entry is None:
            return self._reject(
                RejectionReason.ENTRY_NOT_FOUND, f"Eintrag {entry_id} nicht gefunden."
            )
        if subject_id is not None and self.get_subject(subject_id) is None:
            return self._reject(
                RejectionReason.UNKNOWN_SUBJECT, f"Unbekanntes Fach: {subject_id}"
            )
        if teacher_id is not None and teacher_id != entry.teacher_id:
            blocked = self._teacher_conflict(teacher_id, entry.day, entry.period, ignore=entry)
            if blocked is not None:
                return blocked

        if subject_id is not None:
            entry.subject_id = subject_id
        if teacher_id is not None:
            entry.teacher_id = teacher_id
        self.validate()
        return MutationResult.success(entry.id)

    def move_entry(self, entry_id: str, day: str, period: int) -> bool:
        """Verschiebt einen Eintrag in einen neuen Slot seines Klassen-Bereichs.

        Bei Ablehnung bleibt das Raster unverändert; ein Befund "move_blocked"
        (error) wird an die aktuelle Befundliste angehängt.
        """
        entry = self._find(entry_id)
        if entry is None:
            self._issues.append(ValidationIssue(
                rule="move_blocked",
                severity="error",
                entities=(entry_id,),
                message=f"Verschieben nicht möglich: Eintrag {entry_id} existiert nicht.",
            ))
            return False

        reason: Optional[str] = None
        if not self.config.time_grid.contains(day, period):
            reason = f"Slot {day} {period}. liegt außerhalb des Rasters"
        elif self._occupant(day, period, entry.class_id, ignore=entry) is not None:
            reason = "Zielslot ist bereits belegt"
        else:
            blocked = self._teacher_conflict(entry.teacher_id, day, period, ignore=entry)
            if blocked is not None:
                reason = blocked.message.rstrip(".")

        if reason is not None:
            logger.info(f"Verschieben von {entry_id} nach {day} {period}. abgelehnt: {reason}")
            self._issues.append(ValidationIssue(
                rule="move_blocked",
                severity="error",
                entities=(entry_id, day, str(period)),
                message=f"Verschieben nach {day}, Stunde {period} nicht möglich: {reason}.",
            ))
            return False

        entry.day = day
        entry.period = period
        self.validate()
        return True

    # ─── Interne Hilfen ───────────────────────────────────────────────────────

    def _find(self, entry_id: str) -> Optional[TimetableEntry]:
        return next((e for e in self._entries if e.id == entry_id), None)

    def _same_scope(self, a: Optional[str], b: Optional[str]) -> bool:
        # Ohne Klassen bildet der ganze Plan einen einzigen Bereich
        return a == b if self._classes else True

    def _scope_label(self, class_id: Optional[str]) -> str:
        return f" (Klasse {class_id})" if class_id is not None else ""

    def _unknown_class(self, class_id: Optional[str]) -> Optional[MutationResult]:
        # Im Mehrklassen-Modus muss jeder Eintrag einer bekannten Klasse gehören
        if not self._classes or any(c.id == class_id for c in self._classes):
            return None
        return self._reject(
            RejectionReason.UNKNOWN_CLASS,
            f"Unbekannte Klasse: {class_id}" if class_id is not None
            else "Im Mehrklassen-Modus ist eine Klasse erforderlich.",
        )

    def _occupant(
        self,
        day: str,
        period: int,
        class_id: Optional[str],
        ignore: Optional[TimetableEntry] = None,
    ) -> Optional[TimetableEntry]:
        for e in self._entries:
            if e is ignore:
                continue
            if e.day == day and e.period == period and self._same_scope(e.class_id, class_id):
                return e
        return None

    def _teacher_conflict(
        self,
        teacher_id: str,
        day: str,
        period: int,
        ignore: Optional[TimetableEntry] = None,
    ) -> Optional[MutationResult]:
        """Prüft Verfügbarkeit und Doppelbuchung; None wenn die Lehrkraft frei ist."""
        teacher = self.get_teacher(teacher_id)
        if teacher is None or not teacher.is_available(day, period):
            name = teacher.name if teacher else teacher_id
            return self._reject(
                RejectionReason.TEACHER_UNAVAILABLE,
                f"{name} ist am {day} in Stunde {period} nicht verfügbar.",
            )
        for e in self._entries:
            if e is ignore:
                continue
            if e.teacher_id == teacher_id and e.day == day and e.period == period:
                return self._reject(
                    RejectionReason.TEACHER_DOUBLE_BOOKED,
                    f"{teacher.name} unterrichtet am {day} in Stunde {period} bereits"
                    f"{self._scope_label(e.class_id)}.",
                )
        return None

    @staticmethod
    def _reject(reason: RejectionReason, message: str) -> MutationResult:
        logger.info(f"Änderung abgelehnt ({reason.value}): {message}")
        return MutationResult.rejected(reason, message)
