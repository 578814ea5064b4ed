"""Plain-dict and JSON round trip for instruments and their parts."""
import json
from pathlib import Path
from typing import Optional, Union

from .instrument import Instrument
from .mode import DynamicMode, Mono, MonoKind, Poly
from .note_freq import (Constant, ConstantFreq, DynamicFreq, DynamicGenerator, Portamento,
                        PortamentoFreq)
from .voice import Note, NoteState, Voice


# ── Note state / Note / Voice ──────────────────────────────────

def note_state_to_dict(state: NoteState) -> dict:
    if state.is_playing():
        return {"type": "playing"}
    return {"type": "released", "release_playhead": state.release_playhead}


def note_state_from_dict(data: dict) -> NoteState:
    kind = data["type"]
    if kind == "playing":
        return NoteState.playing()
    if kind == "released":
        return NoteState.released(int(data["release_playhead"]))
    raise ValueError(f"Unknown note state: {kind!r}")


def note_to_dict(note: Optional[Note]) -> Optional[dict]:
    if note is None:
        return None
    return {
        "state": note_state_to_dict(note.state),
        "freq": freq_to_dict(note.freq),
        "hz": note.hz,
        "vel": note.vel,
    }


def note_from_dict(data: Optional[dict]) -> Optional[Note]:
    if data is None:
        return None
    return Note(note_state_from_dict(data["state"]), freq_from_dict(data["freq"]),
                float(data["hz"]), float(data["vel"]))


def voice_to_dict(voice: Voice) -> dict:
    return {"note": note_to_dict(voice.note), "playhead": voice.playhead}


def voice_from_dict(data: dict) -> Voice:
    voice = Voice()
    voice.note = note_from_dict(data["note"])
    voice.playhead = int(data["playhead"])
    return voice


# ── Trajectories ───────────────────────────────────────────────

def freq_to_dict(freq) -> dict:
    if isinstance(freq, ConstantFreq):
        return {"type": "constant", "hz": freq.hz()}
    if isinstance(freq, PortamentoFreq):
        return {
            "type": "portamento",
            "current_sample": freq.current_sample,
            "target_samples": freq.target_samples,
            "start_mel": freq.start_mel,
            "target_mel": freq.target_mel,
        }
    if isinstance(freq, DynamicFreq):
        return {"type": "dynamic", "inner": freq_to_dict(freq.inner)}
    raise ValueError(f"Unknown note freq: {freq!r}")


def freq_from_dict(data: dict):
    kind = data["type"]
    if kind == "constant":
        return ConstantFreq(float(data["hz"]))
    if kind == "portamento":
        return PortamentoFreq(int(data["current_sample"]), int(data["target_samples"]),
                              float(data["start_mel"]), float(data["target_mel"]))
    if kind == "dynamic":
        return DynamicFreq(freq_from_dict(data["inner"]))
    raise ValueError(f"Unknown note freq: {kind!r}")


# ── Generators ─────────────────────────────────────────────────

def generator_to_dict(generator) -> dict:
    if isinstance(generator, Constant):
        return {"type": "constant"}
    if isinstance(generator, Portamento):
        return {"type": "portamento", "samples": generator.samples}
    if isinstance(generator, DynamicGenerator):
        return {"type": "dynamic", "inner": generator_to_dict(generator.inner)}
    raise ValueError(f"Unknown note freq generator: {generator!r}")


def generator_from_dict(data: dict):
    kind = data["type"]
    if kind == "constant":
        return Constant()
    if kind == "portamento":
        return Portamento(int(data["samples"]))
    if kind == "dynamic":
        return DynamicGenerator(generator_from_dict(data["inner"]))
    raise ValueError(f"Unknown note freq generator: {kind!r}")


# ── Modes ──────────────────────────────────────────────────────

def mode_to_dict(mode) -> dict:
    if isinstance(mode, Mono):
        return {"type": "mono", "kind": mode.kind.value, "notes": list(mode.notes)}
    if isinstance(mode, Poly):
        return {"type": "poly"}
    if isinstance(mode, DynamicMode):
        return {"type": "dynamic", "inner": mode_to_dict(mode.inner)}
    raise ValueError(f"Unknown mode: {mode!r}")


def mode_from_dict(data: dict):
    kind = data["type"]
    if kind == "mono":
        return Mono(MonoKind(data["kind"]), [float(hz) for hz in data["notes"]])
    if kind == "poly":
        return Poly()
    if kind == "dynamic":
        return DynamicMode(mode_from_dict(data["inner"]))
    raise ValueError(f"Unknown mode: {kind!r}")


# ── Instrument ─────────────────────────────────────────────────

def instrument_to_dict(instrument: Instrument) -> dict:
    return {
        "mode": mode_to_dict(instrument.mode),
        "voices": [voice_to_dict(v) for v in instrument.voices],
        "detune": instrument.detune,
        "note_freq_gen": generator_to_dict(instrument.note_freq_gen),
        "attack_ms": instrument.attack_ms,
        "release_ms": instrument.release_ms,
    }


def instrument_from_dict(data: dict) -> Instrument:
    voices = [voice_from_dict(v) for v in data["voices"]]
    if not voices:
        raise ValueError("An Instrument must have at least one voice")
    instrument = Instrument(mode_from_dict(data["mode"]), generator_from_dict(data["note_freq_gen"]))
    instrument.voices = voices
    instrument.detune = float(data["detune"])
    instrument.attack_ms = float(data["attack_ms"])
    instrument.release_ms = float(data["release_ms"])
    return instrument


def save_instrument(instrument: Instrument, path: Union[str, Path]):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(instrument_to_dict(instrument), f, indent=2)


def load_instrument(path: Union[str, Path]) -> Instrument:
    with open(path, "r", encoding="utf-8") as f:
        return instrument_from_dict(json.load(f))
