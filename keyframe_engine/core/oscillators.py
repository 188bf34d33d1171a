"""
Periodic and noise signals sampled into keyframes.

Used by the composer for oscillation and camera shake; values are plain
floats computed per frame.
"""

from enum import Enum

import numpy as np


class WaveType(Enum):
    """Available oscillator waveforms."""
    SINE = "sin"
    TRIANGLE = "tri"
    SAWTOOTH = "saw"
    SQUARE = "sq"


WAVE_NAMES = frozenset(w.value for w in WaveType)


def oscillator(
    wave_type: str,
    frame: float,
    period: float,
    phase: float = 0.0,
    amplitude: float = 1.0,
    center: float = 0.0,
) -> float:
    """
    Oscillator value at a given frame.

    Args:
        wave_type: "sin", "tri", "saw" or "sq"
        frame: Frame number (fractional frames allowed)
        period: Oscillation period in frames
        phase: Phase offset in frames
        amplitude: Peak amplitude (half of full range)
        center: Center/offset value

    Returns:
        Oscillator value; ``center`` for a non-positive period or unknown wave
    """
    if period <= 0:
        return center

    pos = frame + phase
    angle = pos * 2 * np.pi / period

    if wave_type == "sin":
        return float(center + np.sin(angle) * amplitude)

    elif wave_type == "tri":
        return float(center + np.arcsin(np.sin(angle)) * (2 * amplitude) / np.pi)

    elif wave_type == "saw":
        return float(center + ((pos % period) / period - 0.5) * 2 * amplitude)

    elif wave_type == "sq":
        return float(center + (1 if np.sin(angle) >= 0 else -1) * amplitude)

    return center


def noise(
    frame: float,
    smoothing: float = 1.0,
    seed: int = 42,
    octaves: int = 1,
) -> float:
    """
    Smooth value noise in [-1, 1].

    Deterministic for a given seed: lattice values come from a generator
    seeded per lattice point, blended with smoothstep.

    Args:
        frame: Frame number
        smoothing: Frames between lattice points (higher = smoother)
        seed: Random seed
        octaves: Number of noise octaves, each half the amplitude
    """
    smoothing = max(smoothing, 1e-6)
    total = 0.0
    amplitude = 1.0
    max_amplitude = 0.0

    for i in range(octaves):
        pos = frame / (smoothing / (2 ** i))
        p0 = int(np.floor(pos))
        p1 = p0 + 1

        v0 = np.random.default_rng([seed, p0 + 2**31, i]).random()
        v1 = np.random.default_rng([seed, p1 + 2**31, i]).random()

        t = pos - p0
        t = t * t * (3 - 2 * t)

        total += (v0 + t * (v1 - v0)) * amplitude
        max_amplitude += amplitude
        amplitude *= 0.5

    return float((total / max_amplitude) * 2.0 - 1.0)


__all__ = [
    "WaveType",
    "WAVE_NAMES",
    "oscillator",
    "noise",
]
