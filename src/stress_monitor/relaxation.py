"""Relaxation content offered to the user when stress runs high."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from stress_monitor.models import StressBand


class RelaxationExercise(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    instructions: str


HIGH_STRESS_SUGGESTION = "Take a break and try deep breathing or meditation."

EXERCISES: tuple[RelaxationExercise, ...] = (
    RelaxationExercise(
        title="Breathing Exercise",
        instructions=(
            "Try the 4-7-8 technique: Inhale for 4 seconds, hold for 7 seconds, "
            "and exhale slowly for 8 seconds."
        ),
    ),
    RelaxationExercise(
        title="Meditation Guide",
        instructions=(
            "Close your eyes, focus on your breath, and try a guided meditation "
            "for 5-10 minutes."
        ),
    ),
    RelaxationExercise(
        title="Play Calming Music",
        instructions="Listen to soothing instrumental or nature sounds to relax your mind.",
    ),
)


def suggestion_for(band: StressBand | None) -> str | None:
    """The on-screen suggestion for *band*; only HIGH gets one."""
    if band == StressBand.HIGH:
        return HIGH_STRESS_SUGGESTION
    return None


def get_exercise(title: str) -> RelaxationExercise:
    """Look up an exercise by its title (case-insensitive).

    Raises :class:`KeyError` for unknown titles.
    """
    for exercise in EXERCISES:
        if exercise.title.lower() == title.strip().lower():
            return exercise
    raise KeyError(title)
