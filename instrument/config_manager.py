"""Instrument settings file management."""
import json
from pathlib import Path
from typing import Optional, Union

from .instrument import Instrument
from .mode import DynamicMode
from .note_freq import DynamicGenerator
from .unit import ms_to_samples

MODES = ("poly", "retrigger", "legato")
GENERATORS = ("constant", "portamento")


class ConfigManager:
    """Manages the stored instrument settings."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        if config_file is None:
            config_file = Path(__file__).parent / "config.json"
        self.config_file = Path(config_file)
        self.config = self._load_config()

    def _load_config(self) -> dict:
        """Load configuration from file, filling missing keys with defaults."""
        config = self._default_config()
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    config.update(json.load(f))
            except Exception:
                return self._default_config()
        return config

    def _default_config(self) -> dict:
        """Return default configuration."""
        return {
            "num_voices": 8,
            "mode": "poly",
            "generator": "constant",
            "portamento_ms": 60.0,
            "detune": 0.0,
            "attack_ms": 10.0,
            "release_ms": 100.0,
            "sample_rate": 48000,
        }

    def save_config(self):
        """Save configuration to file."""
        try:
            with open(self.config_file, 'w') as f:
                json.dump(self.config, f, indent=2)
        except Exception as e:
            print(f"Error saving config: {e}")

    # ── Voices / mode ────────────────────────────────────────────

    def get_num_voices(self) -> int:
        return max(1, int(self.config.get("num_voices", 8)))

    def set_num_voices(self, num_voices: int):
        """Persist the voice count. Clamped to at least 1."""
        self.config["num_voices"] = max(1, int(num_voices))
        self.save_config()

    def get_mode(self) -> str:
        mode = self.config.get("mode", "poly")
        return mode if mode in MODES else "poly"

    def set_mode(self, mode: str):
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}, expected one of {MODES}")
        self.config["mode"] = mode
        self.save_config()

    # ── Pitch ────────────────────────────────────────────────────

    def get_generator(self) -> str:
        generator = self.config.get("generator", "constant")
        return generator if generator in GENERATORS else "constant"

    def set_generator(self, generator: str, portamento_ms: Optional[float] = None):
        if generator not in GENERATORS:
            raise ValueError(f"Unknown generator {generator!r}, expected one of {GENERATORS}")
        self.config["generator"] = generator
        if portamento_ms is not None:
            self.config["portamento_ms"] = max(0.0, float(portamento_ms))
        self.save_config()

    def get_portamento_ms(self) -> float:
        return max(0.0, float(self.config.get("portamento_ms", 60.0)))

    def get_detune(self) -> float:
        return max(0.0, float(self.config.get("detune", 0.0)))

    def set_detune(self, detune: float):
        self.config["detune"] = max(0.0, float(detune))
        self.save_config()

    # ── Envelope ─────────────────────────────────────────────────

    def get_attack_ms(self) -> float:
        return max(0.0, float(self.config.get("attack_ms", 10.0)))

    def get_release_ms(self) -> float:
        return max(0.0, float(self.config.get("release_ms", 100.0)))

    def set_fade(self, attack_ms: float, release_ms: float):
        """Persist attack and release times. Clamped to >= 0."""
        self.config["attack_ms"] = max(0.0, float(attack_ms))
        self.config["release_ms"] = max(0.0, float(release_ms))
        self.save_config()

    def get_sample_rate(self) -> int:
        return int(self.config.get("sample_rate", 48000))

    # ── Construction ─────────────────────────────────────────────

    def build_instrument(self) -> Instrument:
        """Construct an Instrument from the stored settings."""
        if self.get_generator() == "portamento":
            samples = ms_to_samples(self.get_portamento_ms(), self.get_sample_rate())
            generator = DynamicGenerator.portamento(samples)
        else:
            generator = DynamicGenerator.constant()
        mode = getattr(DynamicMode, self.get_mode())()
        return (Instrument(mode, generator)
                .num_voices(self.get_num_voices())
                .with_detune(self.get_detune())
                .fade(self.get_attack_ms(), self.get_release_ms()))
