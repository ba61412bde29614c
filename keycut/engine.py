"""Orchestrator — runs the cut pipeline described by a CutManifest.

``plan_cut`` does everything that can fail on bad input (token syntax,
probing, keyframe lookup) without writing a byte; ``run_plan`` then drives
ffmpeg. ``process`` chains the two.
"""

from contextlib import closing
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path
from typing import Callable

from keycut import ffutil
from keycut.editors.cut import execute
from keycut.logging_config import logger
from keycut.manifest import CutManifest
from keycut.models import CutCase, CutPlan, MediaInfo
from keycut.resolver import resolve
from keycut.timeparse import check_time_token, parse_time
from keycut.workspace import Workspace

ProgressCallback = Callable[[str, float], None]


@dataclass
class EngineResult:
    output_path: Path
    case: CutCase | None = None
    plan: CutPlan | None = None
    duration_original: Fraction = Fraction(0)
    duration_requested: Fraction = Fraction(0)
    duration_final: Fraction = Fraction(0)


def plan_cut(
    manifest: CutManifest, media: MediaInfo | None = None
) -> tuple[MediaInfo, CutPlan]:
    """Resolve *manifest* into a CutPlan without running ffmpeg.

    Pass *media* when the input has already been probed.
    """
    config = manifest.engine

    # Malformed tokens fail before anything touches the input
    check_time_token(manifest.start)
    check_time_token(manifest.end)
    ffutil.check_ffmpeg()

    if media is None:
        media = ffutil.probe(manifest.input)
    start = parse_time(manifest.start, media, config.epsilon_divisor)
    end = parse_time(manifest.end, media, config.epsilon_divisor)

    with closing(ffutil.scan_keyframes(manifest.input)) as keyframes:
        plan = resolve(start, end, media, keyframes, config.epsilon_divisor)
    return media, plan


def run_plan(
    manifest: CutManifest,
    media: MediaInfo,
    plan: CutPlan,
    on_progress: ProgressCallback | None = None,
) -> EngineResult:
    """Execute a resolved *plan* and write ``manifest.output``."""

    def _progress(stage: str, frac: float) -> None:
        if on_progress:
            on_progress(stage, frac)

    def _sub_progress(base: float, span: float):
        """Map the executor's [0,1] onto [base, base+span]."""
        def cb(stage: str, frac: float) -> None:
            _progress(stage, base + frac * span)
        return cb

    with Workspace(suffix=manifest.input.suffix, root=manifest.engine.work_dir) as ws:
        execute(
            plan,
            media,
            manifest.input,
            manifest.output,
            ws,
            on_progress=_sub_progress(0.1, 0.8),
        )

    _progress("Verifying result", 0.92)
    duration_final = ffutil.measure_duration(manifest.output)
    logger.info("Wrote %s", manifest.output)

    _progress("Done", 1.0)
    return EngineResult(
        output_path=manifest.output,
        case=plan.case,
        plan=plan,
        duration_original=media.duration,
        duration_requested=plan.duration,
        duration_final=duration_final,
    )


def process(
    manifest: CutManifest,
    on_progress: ProgressCallback | None = None,
) -> EngineResult:
    """Execute one cut.

    Args:
        manifest: Validated cut manifest.
        on_progress: Optional callback(stage_name, fraction_complete).
    """
    if on_progress:
        on_progress("Resolving cut points", 0.0)
    media, plan = plan_cut(manifest)
    return run_plan(manifest, media, plan, on_progress=on_progress)
