"""Voice allocation modes: how note events are distributed across voices.

A mode decides:

1. Which voice(s) handle a note_on, including voice stealing.
2. Which voice(s) a note_off releases.
3. When voice playheads are reset.

Trajectories for new notes are produced by the note frequency generator that
the Instrument passes in along with its detune amount.
"""
from enum import Enum
from typing import List, Optional

from .unit import NoteHz, NoteVelocity
from .voice import Voice

# Two frequencies closer than this are treated as the same note.
HZ_VARIANCE = 0.25


def does_hz_match(hz: NoteHz, target_hz: NoteHz) -> bool:
    return target_hz - HZ_VARIANCE < hz < target_hz + HZ_VARIANCE


def does_voice_match(voice: Voice, target_hz: NoteHz) -> bool:
    """Is `voice` holding (still playing) a note that matches `target_hz`?"""
    return voice.is_playing() and does_hz_match(voice.note.hz, target_hz)


class MonoKind(Enum):
    """Flavour of monophony."""
    RETRIGGER = "retrigger"  # New notes reset the voice playheads
    LEGATO = "legato"        # New notes keep the envelope running if a note is held


class Mono:
    """Monophonic playback with a stack of fallback notes.

    All voices play the same note in unison. If a new note arrives while one is
    held, the held note is pushed onto the stack; releasing the current note
    falls back to the most recently stacked one.
    """

    def __init__(self, kind: MonoKind = MonoKind.RETRIGGER, notes: Optional[List[NoteHz]] = None):
        self.kind = kind
        self.notes: List[NoteHz] = [] if notes is None else list(notes)

    @classmethod
    def retrigger(cls) -> "Mono":
        return cls(MonoKind.RETRIGGER)

    @classmethod
    def legato(cls) -> "Mono":
        return cls(MonoKind.LEGATO)

    def _reset_playheads(self, voices: List[Voice]):
        for voice in voices:
            voice.reset_playhead()

    def _trigger_all(self, note_hz: NoteHz, note_vel: NoteVelocity, detune: float,
                     note_freq_gen, voices: List[Voice]):
        # Each voice gets its own trajectory, so detune spreads the unison.
        for voice in voices:
            freq = note_freq_gen.generate(note_hz, detune, voice)
            voice.note_on(note_hz, freq, note_vel)

    def note_on(self, note_hz: NoteHz, note_vel: NoteVelocity, detune: float,
                note_freq_gen, voices: List[Voice]):
        # Release first so repeated note_ons for one pitch don't stack it twice.
        self.note_off(note_hz, detune, note_freq_gen, voices)

        current = voices[0]
        if current.is_playing():
            self.notes.append(current.note.hz)
            if self.kind is MonoKind.RETRIGGER:
                self._reset_playheads(voices)
        else:
            self.notes.clear()
            self._reset_playheads(voices)

        self._trigger_all(note_hz, note_vel, detune, note_freq_gen, voices)

    def note_off(self, note_hz: NoteHz, detune: float, note_freq_gen, voices: List[Voice]):
        current = voices[0]
        if does_voice_match(current, note_hz):
            if self.notes:
                old_hz = self.notes.pop()
                if self.kind is MonoKind.RETRIGGER:
                    self._reset_playheads(voices)
                self._trigger_all(old_hz, current.note.vel, detune, note_freq_gen, voices)
                return
            for voice in voices:
                voice.note_off()
        else:
            # A stacked note was released before it got to sound again.
            self.notes = [hz for hz in self.notes if not does_hz_match(hz, note_hz)]

    def stop(self):
        self.notes.clear()

    def __eq__(self, other):
        if not isinstance(other, Mono):
            return NotImplemented
        return self.kind == other.kind and self.notes == other.notes

    def __repr__(self):
        return f"Mono({self.kind}, {self.notes!r})"


class Poly:
    """Polyphonic playback: one note per voice, stealing the oldest voice when all are busy."""

    def note_on(self, note_hz: NoteHz, note_vel: NoteVelocity, detune: float,
                note_freq_gen, voices: List[Voice]):
        # The most recently triggered active voice is the glide source.
        newest = None
        for voice in voices:
            if voice.is_active() and (newest is None or voice.playhead < newest.playhead):
                newest = voice
        freq = note_freq_gen.generate(note_hz, detune, newest)

        oldest = None
        for voice in voices:
            if not voice.is_active():
                voice.reset_playhead()
                voice.note_on(note_hz, freq, note_vel)
                return
            if oldest is None or voice.playhead >= oldest.playhead:
                oldest = voice

        oldest.reset_playhead()
        oldest.note_on(note_hz, freq, note_vel)

    def note_off(self, note_hz: NoteHz, detune: float, note_freq_gen, voices: List[Voice]):
        # Held notes are released before ones already fading, oldest first.
        playing = None
        fading = None
        for voice in voices:
            if not voice.is_active() or not does_hz_match(voice.note.hz, note_hz):
                continue
            if voice.is_playing():
                if playing is None or voice.playhead >= playing.playhead:
                    playing = voice
            elif fading is None or voice.playhead >= fading.playhead:
                fading = voice

        match = playing if playing is not None else fading
        if match is not None:
            match.note_off()

    def stop(self):
        pass

    def __eq__(self, other):
        return isinstance(other, Poly)

    def __repr__(self):
        return "Poly()"


class DynamicMode:
    """Switches between Mono and Poly at runtime."""

    def __init__(self, inner=None):
        self.inner = Poly() if inner is None else inner

    @classmethod
    def retrigger(cls) -> "DynamicMode":
        return cls(Mono.retrigger())

    @classmethod
    def legato(cls) -> "DynamicMode":
        return cls(Mono.legato())

    @classmethod
    def poly(cls) -> "DynamicMode":
        return cls(Poly())

    def note_on(self, note_hz: NoteHz, note_vel: NoteVelocity, detune: float,
                note_freq_gen, voices: List[Voice]):
        self.inner.note_on(note_hz, note_vel, detune, note_freq_gen, voices)

    def note_off(self, note_hz: NoteHz, detune: float, note_freq_gen, voices: List[Voice]):
        self.inner.note_off(note_hz, detune, note_freq_gen, voices)

    def stop(self):
        self.inner.stop()

    def __eq__(self, other):
        if not isinstance(other, DynamicMode):
            return NotImplemented
        return self.inner == other.inner

    def __repr__(self):
        return f"DynamicMode({self.inner!r})"
