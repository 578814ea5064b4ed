#!/usr/bin/env python3
"""ABOUTME: Pitch trajectory tests - constant detune and portamento glides.
ABOUTME: Checks glide endpoints, Mel monotonicity and glide-source selection."""

import random
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from instrument.note_freq import (Constant, ConstantFreq, DynamicFreq, DynamicGenerator,
                                  Portamento, PortamentoFreq)
from instrument.unit import hz_to_mel, hz_to_step, mel_to_hz, ms_to_samples, step_to_hz, to_hz
from instrument.voice import Voice


def test_unit_conversions():
    assert abs(step_to_hz(57) - 440.0) < 1e-9
    assert abs(step_to_hz(69) - 880.0) < 1e-9
    assert abs(hz_to_step(step_to_hz(42.5)) - 42.5) < 1e-9
    assert abs(mel_to_hz(hz_to_mel(1234.5)) - 1234.5) < 1e-6
    assert ms_to_samples(10.0, 48000) == 480
    assert ms_to_samples(0.0, 48000) == 0


def test_to_hz_accepts_names_and_numbers():
    assert to_hz(440) == 440.0
    assert abs(to_hz("A4") - 440.0) < 1e-9
    assert abs(to_hz("a5") - 880.0) < 1e-9
    assert abs(to_hz("C#4") - step_to_hz(49)) < 1e-9
    for bad in ("H4", "A", "4A", ""):
        try:
            to_hz(bad)
        except ValueError:
            continue
        raise AssertionError(f"{bad!r} should be rejected")


def test_constant_without_detune_is_exact():
    freq = Constant().generate(440.0, 0.0, None)
    assert freq.hz() == 440.0
    for _ in range(5):
        assert freq.next_hz() == 440.0


def test_constant_detune_stays_within_range():
    random.seed(1234)
    detune = 0.5
    lo, hi = step_to_hz(57 - detune), step_to_hz(57 + detune)
    values = [Constant().generate(440.0, detune, None).hz() for _ in range(200)]
    assert all(lo - 1e-9 <= hz <= hi + 1e-9 for hz in values)
    assert len(set(values)) > 1


def test_portamento_without_source_does_not_glide():
    freq = Portamento(100).generate(440.0, 0.0, None)
    assert freq.start_mel == freq.target_mel
    assert abs(freq.next_hz() - 440.0) < 1e-9


def test_portamento_glides_from_playing_voice():
    source = Voice()
    source.note_on(220.0, ConstantFreq(220.0), 1.0)
    freq = Portamento(4).generate(440.0, 0.0, source)
    assert abs(freq.hz() - 220.0) < 1e-9
    hzs = [freq.next_hz() for _ in range(6)]
    mels = [hz_to_mel(hz) for hz in hzs]
    assert all(a < b for a, b in zip(mels[:4], mels[1:5]))
    assert hzs[4] == mel_to_hz(freq.target_mel)
    assert hzs[5] == hzs[4]
    assert abs(hzs[4] - 440.0) < 1e-6
    assert freq.current_sample == 4


def test_portamento_interpolates_linearly_in_mel():
    freq = PortamentoFreq.from_hz(10, 1000.0, 100.0)
    freq.current_sample = 5
    midpoint = (hz_to_mel(100.0) + hz_to_mel(1000.0)) / 2
    assert abs(hz_to_mel(freq.hz()) - midpoint) < 1e-6


def test_portamento_ignores_released_source():
    source = Voice()
    source.note_on(220.0, ConstantFreq(220.0), 1.0)
    source.note_off()
    freq = Portamento(4).generate(440.0, 0.0, source)
    assert abs(freq.hz() - 440.0) < 1e-9


def test_portamento_uses_live_pitch_of_gliding_source():
    source = Voice()
    source.note_on(440.0, PortamentoFreq.from_hz(10, 440.0, 220.0), 1.0)
    for _ in range(5):
        source.next_vel_hz(0, 0)
    live_hz = source.note.freq.hz()
    freq = Portamento(10).generate(880.0, 0.0, source)
    assert abs(freq.hz() - live_hz) < 1e-9
    assert 220.0 < live_hz < 440.0


def test_dynamic_generator_dispatches():
    constant = DynamicGenerator.constant().generate(330.0, 0.0, None)
    assert isinstance(constant, DynamicFreq) and isinstance(constant.inner, ConstantFreq)
    assert constant.next_hz() == 330.0

    source = Voice()
    source.note_on(110.0, DynamicFreq(ConstantFreq(110.0)), 1.0)
    glide = DynamicGenerator.portamento(8).generate(330.0, 0.0, source)
    assert isinstance(glide.inner, PortamentoFreq)
    assert abs(glide.next_hz() - 110.0) < 1e-9


def main():
    tests = [obj for name, obj in sorted(globals().items()) if name.startswith("test_")]
    failed = 0
    for test in tests:
        try:
            test()
            print(f"✓ {test.__name__}")
        except AssertionError as e:
            failed += 1
            print(f"✗ {test.__name__} {e}")
    print(f"\nTest Results: {len(tests) - failed}/{len(tests)} passed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
