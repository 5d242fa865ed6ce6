# daq/file_source.py
"""Chunked WAV reader for replaying recorded signals through the touch detector."""

from __future__ import annotations

import logging
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WavInfo:
    path: Path
    n_channels: int
    sample_rate: int
    sample_width: int  # bytes per sample
    n_frames: int

    @property
    def duration_seconds(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.n_frames / self.sample_rate


def _open(path: Union[str, Path]) -> Tuple[Path, wave.Wave_read]:
    path = Path(path)
    if not path.exists():
        raise RuntimeError(f"File not found: {path}")
    try:
        return path, wave.open(str(path), "rb")
    except (wave.Error, EOFError, OSError) as exc:
        raise RuntimeError(f"Failed to open WAV file: {exc}") from exc


def read_wav_info(path: Union[str, Path]) -> WavInfo:
    path, wav = _open(path)
    with wav:
        return WavInfo(
            path=path,
            n_channels=wav.getnchannels(),
            sample_rate=wav.getframerate(),
            sample_width=wav.getsampwidth(),
            n_frames=wav.getnframes(),
        )


def decode_frames(raw_bytes: bytes, sample_width: int, n_channels: int) -> Optional[np.ndarray]:
    """
    Convert raw PCM bytes to an int16 (frames, channels) array.

    Handles 8-bit unsigned, 16-bit, 24-bit and 32-bit signed PCM; widths other
    than 16 bits are rescaled to the int16 range.
    """
    if not raw_bytes or n_channels <= 0:
        return None

    if sample_width == 1:  # 8-bit unsigned
        data = np.frombuffer(raw_bytes, dtype=np.uint8)
        data = ((data.astype(np.int16) - 128) << 8).astype(np.int16)
    elif sample_width == 2:
        data = np.frombuffer(raw_bytes, dtype="<i2").astype(np.int16)
    elif sample_width == 3:  # 24-bit little-endian, keep the top 16 bits
        raw = np.frombuffer(raw_bytes, dtype=np.uint8).reshape(-1, 3)
        data = (raw[:, 1].astype(np.uint16) | (raw[:, 2].astype(np.uint16) << 8)).view(np.int16)
    elif sample_width == 4:
        data = (np.frombuffer(raw_bytes, dtype="<i4") >> 16).astype(np.int16)
    else:
        raise ValueError(f"Unsupported sample width: {sample_width}")

    frames = data.size // n_channels
    if frames == 0:
        return None
    return data[: frames * n_channels].reshape((frames, n_channels))


def iter_wav_chunks(
    path: Union[str, Path],
    chunk_size: int = 1024,
    *,
    channel: int = 0,
) -> Iterator[Tuple[int, np.ndarray]]:
    """
    Yield ``(sample_rate, samples)`` blocks of one channel as int16 arrays.

    The final block may be shorter than `chunk_size`.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    path, wav = _open(path)
    with wav:
        n_channels = wav.getnchannels()
        sample_rate = wav.getframerate()
        sample_width = wav.getsampwidth()
        if not 0 <= channel < n_channels:
            raise ValueError(f"channel {channel} out of range for {n_channels}-channel file")
        logger.info(
            "Opened WAV file: %s (%d channels, %d Hz, %d-bit, %d frames)",
            path.name,
            n_channels,
            sample_rate,
            sample_width * 8,
            wav.getnframes(),
        )
        while True:
            try:
                raw_bytes = wav.readframes(chunk_size)
            except (wave.Error, EOFError, OSError) as exc:
                raise RuntimeError(f"Failed to read from WAV file: {exc}") from exc
            data = decode_frames(raw_bytes, sample_width, n_channels)
            if data is None:
                break
            yield sample_rate, np.ascontiguousarray(data[:, channel])


__all__ = ["WavInfo", "decode_frames", "iter_wav_chunks", "read_wav_info"]
