"""Pull blocks of frames from an Instrument into numpy buffers for a DSP stage."""
from typing import Tuple

import numpy as np

from .instrument import Instrument


def render_block(instrument: Instrument, num_frames: int, sample_rate: float) -> Tuple[np.ndarray, np.ndarray]:
    """Step `instrument` through `num_frames` frames.

    Args:
        instrument: Instrument to pull from. Its voices advance by `num_frames`.
        num_frames: Number of frames in the block.
        sample_rate: Output sample rate in hz.

    Returns:
        (velocities, frequencies), each float32 of shape (num_voices, num_frames).
        Silent voice slots are 0.0 in both arrays.
    """
    num_voices = len(instrument.voices)
    velocities = np.zeros((num_voices, num_frames), dtype=np.float32)
    frequencies = np.zeros((num_voices, num_frames), dtype=np.float32)
    for frame in range(num_frames):
        # One cursor per frame keeps envelope timing locked to the sample rate.
        for voice_idx, vel_hz in enumerate(instrument.frames_per_voice(sample_rate)):
            if vel_hz is not None:
                velocities[voice_idx, frame], frequencies[voice_idx, frame] = vel_hz
    return velocities, frequencies


def mix_down(velocities: np.ndarray) -> np.ndarray:
    """Sum velocities across voices, one value per frame."""
    return velocities.sum(axis=0).astype(np.float32)
