"""Frame-info editor — burns frame number and timestamp onto a copy."""

from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path

from keycut import ffutil
from keycut.logging_config import logger
from keycut.timeparse import format_seconds


@dataclass
class BurnResult:
    output_path: Path
    total_frames: int
    fps: tuple[int, int] | None


def default_burn_output(input_path: Path) -> Path:
    return input_path.with_stem(input_path.stem + "_frameinfo")


def apply_frame_burn(
    input_path: Path,
    output_path: Path | None = None,
    fontfile: Path | None = None,
) -> BurnResult:
    """Write a copy of *input_path* with ``Frame: n | Time: pts`` drawn on it.

    Handy for checking by eye that a cut starts and ends on the intended
    frames.
    """
    output_path = output_path or default_burn_output(input_path)

    media = ffutil.probe(input_path)
    if media.fps is not None:
        num, den = media.fps
        logger.info(
            "Detected framerate: %d/%d (%s fps)", num, den, format_seconds(Fraction(num, den))
        )
    total_frames = ffutil.count_frames(input_path)
    logger.info("Total frames: %d", total_frames)

    ffutil.burn_frame_info(input_path, output_path, fontfile=fontfile)
    return BurnResult(output_path=output_path, total_frames=total_frames, fps=media.fps)
