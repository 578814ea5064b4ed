"""Performable instrument: turns note events into per-frame (velocity, hz) for each voice."""
import copy
from typing import List, Optional, Tuple, Union

from .mode import DynamicMode
from .note_freq import Constant
from .unit import NoteHz, NoteVelocity, ms_to_samples, to_hz
from .voice import Voice


class ConfigError(ValueError):
    """Raised when an Instrument is configured with invalid settings."""


class Instrument:
    """Converts note_on/note_off events into a stream of voices for a synth or sampler.

    The Instrument owns:

    - `mode`: Mono (retrigger/legato) or Poly voice allocation.
    - `voices`: at least one Voice. Mono plays all voices in unison; Poly plays
      one note per voice.
    - `detune`: random per-note pitch spread in steps.
    - `note_freq_gen`: constant pitch or portamento.
    - `attack_ms` / `release_ms`: linear fade in and fade out durations.

    Once per audio frame, call `frames_per_voice(sample_rate)` and walk the
    returned cursor to get one entry per voice.
    """

    def __init__(self, mode=None, note_freq_gen=None):
        self.mode = DynamicMode.poly() if mode is None else mode
        self.voices: List[Voice] = [Voice()]
        self.detune = 0.0
        self.note_freq_gen = Constant() if note_freq_gen is None else note_freq_gen
        self.attack_ms = 0.0
        self.release_ms = 0.0
        self.is_paused = False

    # ── Builder ──────────────────────────────────────────────────

    def num_voices(self, num_voices: int) -> "Instrument":
        self.set_num_voices(num_voices)
        return self

    def fade(self, attack_ms: float, release_ms: float) -> "Instrument":
        self.attack_ms = attack_ms
        self.release_ms = release_ms
        return self

    def attack(self, attack_ms: float) -> "Instrument":
        self.attack_ms = attack_ms
        return self

    def release(self, release_ms: float) -> "Instrument":
        self.release_ms = release_ms
        return self

    def with_detune(self, detune: float) -> "Instrument":
        self.set_detune(detune)
        return self

    def note_freq_generator(self, generator) -> "Instrument":
        self.set_note_freq_generator(generator)
        return self

    # ── Settings ─────────────────────────────────────────────────

    def set_num_voices(self, num_voices: int):
        """Grow or shrink the voice pool.

        New voices are copies of the current last voice. Removed voices are
        dropped immediately, without a release fade.

        Raises:
            ConfigError: If `num_voices` is 0. The pool is left unchanged.
        """
        if num_voices < 1:
            raise ConfigError(
                f"An Instrument must have at least one voice, but the requested number is {num_voices}.")
        length = len(self.voices)
        if length < num_voices:
            last_voice = self.voices[-1]
            self.voices.extend(copy.deepcopy(last_voice) for _ in range(num_voices - length))
        elif length > num_voices:
            del self.voices[num_voices:]

    def set_detune(self, detune: float):
        if detune < 0.0:
            raise ValueError(f"detune must be >= 0, got {detune}")
        self.detune = detune

    def set_note_freq_generator(self, generator):
        """Replace the generator, re-deriving the trajectory of every active note.

        Each new trajectory uses the voice itself as the glide source, so a
        portamento generator continues from the pitch the voice is sounding now.
        """
        self.note_freq_gen = generator
        for voice in self.voices:
            if voice.note is not None:
                voice.note.freq = generator.generate(voice.note.hz, self.detune, voice)

    # ── Events ───────────────────────────────────────────────────

    def note_on(self, note_hz: Union[float, str], note_vel: NoteVelocity):
        """Begin playback of a note, stealing the oldest voice in Poly mode if none are free."""
        self.mode.note_on(to_hz(note_hz), note_vel, self.detune, self.note_freq_gen, self.voices)

    def note_off(self, note_hz: Union[float, str]):
        """Release the note that was triggered with the matching frequency."""
        self.mode.note_off(to_hz(note_hz), self.detune, self.note_freq_gen, self.voices)

    def stop(self):
        """Stop playback and clear every note, skipping release fades."""
        self.mode.stop()
        for voice in self.voices:
            voice.stop()

    def pause(self):
        self.is_paused = True

    def unpause(self):
        self.is_paused = False

    def is_active(self) -> bool:
        if self.is_paused:
            return False
        return any(voice.is_active() for voice in self.voices)

    # ── Frames ───────────────────────────────────────────────────

    def frames_per_voice(self, sample_rate: float) -> "FramePerVoice":
        """Cursor over every voice for the next frame at `sample_rate`."""
        return FramePerVoice(
            ms_to_samples(self.attack_ms, sample_rate),
            ms_to_samples(self.release_ms, sample_rate),
            self.voices,
            self.is_paused,
        )

    begin_frame = frames_per_voice

    def __repr__(self):
        return (f"Instrument(mode={self.mode!r}, voices={len(self.voices)}, detune={self.detune}, "
                f"note_freq_gen={self.note_freq_gen!r}, attack_ms={self.attack_ms}, "
                f"release_ms={self.release_ms})")


class FramePerVoice:
    """Yields the (velocity, hz) of each voice for a single frame, or None for silent voices.

    Iteration stops after the last voice; a new cursor is needed for the next frame.
    """

    def __init__(self, attack: int, release: int, voices: List[Voice], paused: bool = False):
        self.attack = attack
        self.release = release
        self._voices = iter(voices)
        self._remaining = len(voices)
        self._paused = paused

    def __len__(self):
        return self._remaining

    def __iter__(self):
        return self

    def __next__(self) -> Optional[Tuple[NoteVelocity, NoteHz]]:
        voice = next(self._voices)
        self._remaining -= 1
        if self._paused:
            return None
        return voice.next_vel_hz(self.attack, self.release)
