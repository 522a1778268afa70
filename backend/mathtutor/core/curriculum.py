"""Curriculum Lookup — exercise search in the nested curriculum document.

Invariants:
    - Curriculum shape: levels[].chapters[].series[].exercises[]
    - Missing or null child lists are treated as empty (document is hand-edited)
    - Exercises without an "id" are skipped
"""

from collections.abc import Iterator

from mathtutor.core.domain_types import ExerciseId


def iter_exercises(levels: list[dict]) -> Iterator[dict]:
    """Yield every exercise in document order."""
    for level in levels or []:
        for chapter in level.get("chapters") or []:
            for series in chapter.get("series") or []:
                for exercise in series.get("exercises") or []:
                    if exercise and exercise.get("id"):
                        yield exercise


def find_exercise(levels: list[dict], exercise_id: ExerciseId) -> dict | None:
    """First exercise whose id matches, or None."""
    return next(
        (ex for ex in iter_exercises(levels) if ex["id"] == exercise_id), None,
    )


def correction_context(exercise: dict) -> str:
    """Full correction when present, else the short snippet."""
    return exercise.get("fullCorrection") or exercise.get("correctionSnippet") or ""
