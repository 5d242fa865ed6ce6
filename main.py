"""Replay a recorded WAV file through the touch detector.

Samples are fed chunk by chunk, the way the acquisition tick would feed them,
with one `update` call after every push. Each detection edge is logged.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from core.touch_detector import TouchDetector
from daq.file_source import iter_wav_chunks
from shared.app_settings import TouchSettings

logger = logging.getLogger("touch_replay")

CHUNK_SIZE = 512  # Frames per push, roughly one acquisition callback at 10 kHz


def replay(path: str, settings: TouchSettings, *, chunk_size: int = CHUNK_SIZE, channel: int = 0) -> List[float]:
    """Run the file through a fresh detector and return the rising-edge times in seconds."""
    detector = TouchDetector(hop_seconds=settings.hop_seconds)
    detector.apply_settings(settings)

    onsets: List[float] = []
    position = 0
    for sample_rate, samples in iter_wav_chunks(path, chunk_size, channel=channel):
        was_detected = detector.is_touch_detected()
        detector.push_samples(samples)
        position += samples.shape[0]
        if not detector.update(sample_rate):
            continue
        t = position / sample_rate
        if detector.is_touch_detected() and detector.samples_since_last_detection == 0:
            onsets.append(t)
            logger.info("%8.3f s  touch (p=%.3f)", t, detector.touch_probability())
        elif was_detected and not detector.is_touch_detected():
            logger.info("%8.3f s  release (p=%.3f)", t, detector.touch_probability())
    return onsets


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    defaults = TouchSettings()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("wav", help="16-bit PCM WAV file to replay")
    parser.add_argument("--threshold", type=float, default=defaults.threshold)
    parser.add_argument("--cooldown", type=float, default=defaults.cooldown_seconds, help="seconds")
    parser.add_argument("--hop", type=float, default=defaults.hop_seconds, help="seconds between predictions")
    parser.add_argument("--channel", type=int, default=0)
    parser.add_argument("--chunk-size", type=int, default=CHUNK_SIZE)
    parser.add_argument("-v", "--verbose", action="store_true", help="log every prediction")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings = TouchSettings(
        enabled=True,
        threshold=args.threshold,
        cooldown_seconds=args.cooldown,
        hop_seconds=args.hop,
    )
    try:
        settings.validate()
        onsets = replay(args.wav, settings, chunk_size=args.chunk_size, channel=args.channel)
    except (RuntimeError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    logger.info("%d touch event(s) detected", len(onsets))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
