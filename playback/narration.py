"""
Narration collaborators.

The controller only ever asks a narrator to cancel the current utterance and
to announce text for a step. Voice selection and speech synthesis live behind
this interface.
"""
from abc import ABC, abstractmethod
from typing import Optional

from core.models import PoseLibrary, PoseStep


class Narrator(ABC):
    """Base class for narration outputs."""

    @abstractmethod
    def announce(self, text: str, step_id: str):
        """
        Start speaking text for a step. Must not block.

        Args:
            text: Text to speak (e.g., "Downward Dog")
            step_id: Interval ID of the step being announced
        """
        raise NotImplementedError()

    @abstractmethod
    def cancel(self):
        """Stop any utterance in progress."""
        raise NotImplementedError()


class NullNarrator(Narrator):
    """Narrator that discards everything (narration disabled)."""

    def announce(self, text: str, step_id: str):
        pass

    def cancel(self):
        pass


class ConsoleNarrator(Narrator):
    """Narrator that prints announcements to the terminal."""

    def __init__(self):
        self.current: Optional[str] = None

    def announce(self, text: str, step_id: str):
        self.current = step_id
        print(f"[NARRATION] {text}")

    def cancel(self):
        self.current = None


def narration_text(step: PoseStep, library: Optional[PoseLibrary] = None) -> str:
    """
    Text spoken when a step starts.

    Args:
        step: Pose step being entered
        library: Pose library used to name the variation

    Returns:
        Pose name plus non-default variation name, falling back to the
        variation ID when the library does not know it
    """
    if library is not None:
        name = library.display_name(step.pose_variation_id)
        if name:
            return name
    return step.pose_variation_id
