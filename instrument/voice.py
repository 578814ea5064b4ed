"""A single instrument voice: note state machine and envelope stepping."""
import time
from typing import Any, Optional, Tuple

from .unit import NoteHz, NoteVelocity, Playhead


class NoteState:
    """Playback state of a note: playing, or released and fading out."""

    PLAYING = "playing"
    RELEASED = "released"

    def __init__(self, kind: str = PLAYING, release_playhead: Playhead = 0):
        self.kind = kind
        # Frames elapsed since release. Only meaningful while released.
        self.release_playhead = release_playhead

    @classmethod
    def playing(cls) -> "NoteState":
        return cls(cls.PLAYING)

    @classmethod
    def released(cls, release_playhead: Playhead = 0) -> "NoteState":
        return cls(cls.RELEASED, release_playhead)

    def is_playing(self) -> bool:
        return self.kind == self.PLAYING

    def is_released(self) -> bool:
        return self.kind == self.RELEASED

    def __eq__(self, other):
        if not isinstance(other, NoteState):
            return NotImplemented
        if self.kind != other.kind:
            return False
        return self.is_playing() or self.release_playhead == other.release_playhead

    def __repr__(self):
        if self.is_playing():
            return "NoteState.playing()"
        return f"NoteState.released({self.release_playhead})"


class Note:
    """A note currently being performed by a Voice."""

    def __init__(self, state: NoteState, freq: Any, hz: NoteHz, vel: NoteVelocity,
                 time_of_note_on: Optional[float] = None):
        self.state = state
        # Pitch trajectory produced by the note frequency generator.
        self.freq = freq
        # The hz of the note_on event, used to match note_offs.
        self.hz = hz
        self.vel = vel
        self.time_of_note_on = time.monotonic() if time_of_note_on is None else time_of_note_on

    def __eq__(self, other):
        if not isinstance(other, Note):
            return NotImplemented
        return (self.state == other.state and self.freq == other.freq
                and self.hz == other.hz and self.vel == other.vel)

    def __repr__(self):
        return f"Note({self.state!r}, hz={self.hz}, vel={self.vel}, freq={self.freq!r})"


class Voice:
    """One slot of an Instrument, playing at most one note at a time."""

    def __init__(self):
        self.note: Optional[Note] = None
        # Frames played since the note began. Survives the note finishing so
        # that voice stealing can still compare ages; only stop() clears it.
        self.playhead: Playhead = 0

    def is_active(self) -> bool:
        return self.note is not None

    def is_playing(self) -> bool:
        return self.note is not None and self.note.state.is_playing()

    def reset_playhead(self):
        self.playhead = 0

    def note_on(self, hz: NoteHz, freq: Any, vel: NoteVelocity):
        """Start a new note, replacing any current one. The playhead is left alone."""
        self.note = Note(NoteState.playing(), freq, hz, vel)

    def note_off(self):
        if self.note is not None:
            self.note.state = NoteState.released(0)

    def stop(self):
        self.note = None
        self.playhead = 0

    def _next_attack_amp(self, attack: int) -> float:
        if self.playhead < attack:
            amp = self.playhead / attack
            self.playhead += 1
            return amp
        return 1.0

    def next_vel_hz(self, attack: int, release: int) -> Optional[Tuple[NoteVelocity, NoteHz]]:
        """Step the envelope and pitch by one frame.

        Args:
            attack: Attack duration in frames.
            release: Release duration in frames.

        Returns:
            (velocity, hz) for this frame, or None if the voice is silent. A
            released note whose fade has completed is cleared here.
        """
        note = self.note
        if note is None:
            return None

        state = note.state
        if state.is_playing():
            attack_amp = self._next_attack_amp(attack)
            return note.vel * attack_amp, note.freq.next_hz()

        if state.release_playhead < release:
            attack_amp = self._next_attack_amp(attack)
            release_amp = (release - state.release_playhead) / release
            state.release_playhead += 1
            return note.vel * attack_amp * release_amp, note.freq.next_hz()

        # Release fade finished, the voice is free again.
        self.note = None
        return None

    def __eq__(self, other):
        if not isinstance(other, Voice):
            return NotImplemented
        return self.note == other.note and self.playhead == other.playhead

    def __repr__(self):
        return f"Voice(note={self.note!r}, playhead={self.playhead})"
