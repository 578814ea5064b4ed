"""Pitch and time units shared by voices, modes and generators."""
import math
import re
from typing import Union

from mingus.containers import Note as MingusNote
import mingus.core.notes as notes

NoteHz = float
NoteVelocity = float
Playhead = int

# A4 sits on step 57, the same numbering mingus uses for int(Note).
TUNING_HZ = 440.0
TUNING_STEP = 57

_NOTE_NAME_RE = re.compile(r"^([A-Ga-g][#b]*)(-?\d+)$")


def hz_to_mel(hz: float) -> float:
    return 2595.0 * math.log10(1.0 + hz / 700.0)


def mel_to_hz(mel: float) -> float:
    return 700.0 * (10.0 ** (mel / 2595.0) - 1.0)


def hz_to_step(hz: float) -> float:
    return TUNING_STEP + 12.0 * math.log2(hz / TUNING_HZ)


def step_to_hz(step: float) -> float:
    return TUNING_HZ * (2.0 ** ((step - TUNING_STEP) / 12.0))


def ms_to_samples(ms: float, sample_rate: float) -> int:
    """Number of whole frames covered by `ms` milliseconds at `sample_rate`."""
    return int(ms / 1000.0 * sample_rate)


def to_hz(note: Union[float, int, str]) -> NoteHz:
    """Convert a frequency or a note name with octave (e.g. "A4", "C#3") to hz.

    Args:
        note: Frequency in hz, or a note name followed by its octave.

    Returns:
        Frequency in hz as a float.

    Raises:
        ValueError: If `note` is a string that is not a valid note name.
    """
    if isinstance(note, str):
        match = _NOTE_NAME_RE.match(note.strip())
        if match is None:
            raise ValueError(f"Invalid note name: {note!r}")
        name = match.group(1)[0].upper() + match.group(1)[1:]
        if not notes.is_valid_note(name):
            raise ValueError(f"Invalid note name: {note!r}")
        return float(MingusNote(name, int(match.group(2))).to_hertz(TUNING_HZ))
    return float(note)
