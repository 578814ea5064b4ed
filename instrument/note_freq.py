"""Note frequency generators and the pitch trajectories they produce.

A generator turns the hz of a note_on event into a trajectory object. The
trajectory is stepped once per frame by the Voice that owns it:

- `hz()` returns the current pitch without advancing.
- `next_hz()` returns the current pitch, then advances by one frame.

Generators receive the voice that should act as the glide source (or None), so
that portamento can start from the live pitch of the previous note rather than
its nominal note_on pitch.
"""
import random
from typing import Optional

from .unit import NoteHz, hz_to_mel, hz_to_step, mel_to_hz, step_to_hz
from .voice import Voice


def generate_constant_freq(note_hz: NoteHz, detune: float) -> NoteHz:
    """Apply a uniformly random detune of up to +/- `detune` steps to `note_hz`."""
    if detune > 0.0:
        step_offset = random.uniform(-detune, detune)
        return step_to_hz(hz_to_step(note_hz) + step_offset)
    return note_hz


def last_playing_hz(voice: Optional[Voice]) -> Optional[NoteHz]:
    """Current pitch of `voice` if it is holding a note, else None."""
    if voice is not None and voice.is_playing():
        return voice.note.freq.hz()
    return None


class ConstantFreq:
    """A static pitch."""

    def __init__(self, hz: NoteHz):
        self._hz = hz

    def hz(self) -> NoteHz:
        return self._hz

    def next_hz(self) -> NoteHz:
        return self._hz

    def __eq__(self, other):
        if not isinstance(other, ConstantFreq):
            return NotImplemented
        return self._hz == other._hz

    def __repr__(self):
        return f"ConstantFreq({self._hz})"


class PortamentoFreq:
    """Glides linearly in Mel from a start pitch to a target over `target_samples` frames."""

    def __init__(self, current_sample: int, target_samples: int, start_mel: float, target_mel: float):
        self.current_sample = current_sample
        self.target_samples = target_samples
        self.start_mel = start_mel
        self.target_mel = target_mel

    @classmethod
    def from_hz(cls, target_samples: int, target_hz: NoteHz,
                start_hz: Optional[NoteHz] = None) -> "PortamentoFreq":
        if start_hz is None:
            start_hz = target_hz
        return cls(0, target_samples, hz_to_mel(start_hz), hz_to_mel(target_hz))

    def hz(self) -> NoteHz:
        if self.current_sample < self.target_samples:
            perc = self.current_sample / self.target_samples
            mel = self.start_mel + perc * (self.target_mel - self.start_mel)
            return mel_to_hz(mel)
        return mel_to_hz(self.target_mel)

    def next_hz(self) -> NoteHz:
        hz = self.hz()
        if self.current_sample < self.target_samples:
            self.current_sample += 1
        return hz

    def __eq__(self, other):
        if not isinstance(other, PortamentoFreq):
            return NotImplemented
        return (self.current_sample, self.target_samples, self.start_mel, self.target_mel) == \
            (other.current_sample, other.target_samples, other.start_mel, other.target_mel)

    def __repr__(self):
        return (f"PortamentoFreq(current_sample={self.current_sample}, "
                f"target_samples={self.target_samples}, start_mel={self.start_mel}, "
                f"target_mel={self.target_mel})")


class DynamicFreq:
    """Wraps either a ConstantFreq or a PortamentoFreq, chosen at runtime."""

    def __init__(self, inner):
        self.inner = inner

    def hz(self) -> NoteHz:
        return self.inner.hz()

    def next_hz(self) -> NoteHz:
        return self.inner.next_hz()

    def __eq__(self, other):
        if not isinstance(other, DynamicFreq):
            return NotImplemented
        return self.inner == other.inner

    def __repr__(self):
        return f"DynamicFreq({self.inner!r})"


class Constant:
    """Generates static pitches, detuned per note_on."""

    def generate(self, note_hz: NoteHz, detune: float, voice: Optional[Voice] = None) -> ConstantFreq:
        return ConstantFreq(generate_constant_freq(note_hz, detune))

    def __eq__(self, other):
        return isinstance(other, Constant)

    def __repr__(self):
        return "Constant()"


class Portamento:
    """Generates glides lasting `samples` frames from the glide source voice's live pitch."""

    def __init__(self, samples: int):
        self.samples = samples

    def generate(self, note_hz: NoteHz, detune: float, voice: Optional[Voice] = None) -> PortamentoFreq:
        target_hz = generate_constant_freq(note_hz, detune)
        return PortamentoFreq.from_hz(self.samples, target_hz, last_playing_hz(voice))

    def __eq__(self, other):
        if not isinstance(other, Portamento):
            return NotImplemented
        return self.samples == other.samples

    def __repr__(self):
        return f"Portamento({self.samples})"


class DynamicGenerator:
    """A generator that can be switched between constant and portamento at runtime."""

    def __init__(self, inner=None):
        self.inner = Constant() if inner is None else inner

    @classmethod
    def constant(cls) -> "DynamicGenerator":
        return cls(Constant())

    @classmethod
    def portamento(cls, samples: int) -> "DynamicGenerator":
        return cls(Portamento(samples))

    def generate(self, note_hz: NoteHz, detune: float, voice: Optional[Voice] = None) -> DynamicFreq:
        return DynamicFreq(self.inner.generate(note_hz, detune, voice))

    def __eq__(self, other):
        if not isinstance(other, DynamicGenerator):
            return NotImplemented
        return self.inner == other.inner

    def __repr__(self):
        return f"DynamicGenerator({self.inner!r})"
