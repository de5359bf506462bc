from __future__ import annotations

import base64
from typing import List

MAX_BINS = 256


def _decode_samples(frames: bytes, sampwidth: int) -> List[int]:
    """Little-endian PCM to signed ints. 8-bit WAV is unsigned."""
    if sampwidth == 1:
        return [b - 128 for b in frames]
    usable = len(frames) - len(frames) % sampwidth
    return [
        int.from_bytes(frames[i:i + sampwidth], byteorder="little", signed=True)
        for i in range(0, usable, sampwidth)
    ]


def _flat(bins: int) -> str:
    return base64.b64encode(bytes(bins)).decode("ascii")


def compute_waveform_b64(frames: bytes, nchannels: int, sampwidth: int, bins: int = MAX_BINS) -> str:
    """
    Compute the base64 amplitude preview Discord shows on a voice message.

    Channels are averaged to mono, the signal is normalized to its peak and
    split into at most 256 windows whose mean absolute amplitude is mapped to
    0..255. Unsupported sample widths and silence give a flat waveform.
    """
    bins = max(1, min(bins, MAX_BINS))
    if sampwidth not in (1, 2, 3, 4) or nchannels < 1:
        return _flat(bins)

    samples = _decode_samples(frames, sampwidth)
    if nchannels > 1:
        samples = [
            sum(samples[i:i + nchannels]) // nchannels
            for i in range(0, len(samples) - len(samples) % nchannels, nchannels)
        ]
    if not samples:
        return _flat(bins)

    peak = max(abs(s) for s in samples) or 1
    stride = max(1, len(samples) // bins)
    levels: List[int] = []
    for start in range(0, len(samples), stride):
        if len(levels) >= bins:
            break
        window = samples[start:start + stride]
        amp = sum(abs(s) for s in window) / (len(window) * peak)
        levels.append(max(0, min(255, round(amp * 255))))

    levels.extend([0] * (bins - len(levels)))
    return base64.b64encode(bytes(levels)).decode("ascii")
