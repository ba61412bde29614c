"""Cut executor — turns a CutPlan into ffmpeg invocations."""

import shutil
from pathlib import Path
from typing import Callable

from keycut import ffutil
from keycut.logging_config import logger
from keycut.models import CutCase, CutPlan, MediaInfo
from keycut.workspace import Workspace


def _cut_on_keyframe(
    plan: CutPlan, media: MediaInfo, input_path: Path, ws: Workspace
) -> Path:
    video = ws.path("video")
    ffutil.copy_segment(input_path, plan.next_keyframe, plan.end_time, video)
    return video


def _cut_single_gop(
    plan: CutPlan, media: MediaInfo, input_path: Path, ws: Workspace
) -> Path:
    video = ws.path("video")
    ffutil.reencode_segment(
        input_path,
        plan.prev_keyframe,
        plan.start_offset,
        plan.end_offset,
        media.codec_name,
        media.time_base_den,
        video,
    )
    return video


def _cut_split_gop(
    plan: CutPlan, media: MediaInfo, input_path: Path, ws: Workspace
) -> Path:
    head = ws.path("head")
    tail = ws.path("tail")
    ffutil.reencode_segment(
        input_path,
        plan.prev_keyframe,
        plan.start_offset,
        plan.keyframe_offset,
        media.codec_name,
        media.time_base_den,
        head,
    )
    ffutil.copy_segment(input_path, plan.next_keyframe, plan.end_time, tail)

    concat_list = ffutil.write_concat_list([head, tail], ws.path("concat", suffix=".txt"))
    video = ws.path("video")
    ffutil.concat_segments(concat_list, video)
    ws.discard(head, tail, concat_list)
    return video


_HANDLERS = {
    CutCase.ON_KEYFRAME: _cut_on_keyframe,
    CutCase.SINGLE_GOP: _cut_single_gop,
    CutCase.SPLIT_GOP: _cut_split_gop,
}


def finalize_audio(
    plan: CutPlan,
    media: MediaInfo,
    input_path: Path,
    video: Path,
    output_path: Path,
    ws: Workspace,
) -> Path:
    """Add audio matching the video intermediate and move the result into place.

    Audio length follows the measured video, not the requested range, since
    re-encoding can shift the video's duration slightly.
    """
    audio = None
    if media.has_audio:
        duration = ffutil.measure_duration(video)
        audio = ws.path("audio")
        ffutil.extract_audio(input_path, plan.start_raw, duration, audio)
    else:
        logger.info("No audio stream in %s, output will be video-only", input_path)

    final = ws.path("final", suffix=output_path.suffix)
    ffutil.mux(video, audio, final)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(final), str(output_path))
    return output_path


def execute(
    plan: CutPlan,
    media: MediaInfo,
    input_path: Path,
    output_path: Path,
    workspace: Workspace,
    on_progress: Callable[[str, float], None] | None = None,
) -> Path:
    """Run the ffmpeg stages for *plan* and write *output_path*.

    *output_path* is only created once every stage succeeded.
    """

    def _progress(stage: str, frac: float) -> None:
        if on_progress:
            on_progress(stage, frac)

    _progress(f"Cutting video ({plan.case.value})", 0.0)
    video = _HANDLERS[plan.case](plan, media, input_path, workspace)

    _progress("Adding audio", 0.7)
    finalize_audio(plan, media, input_path, video, output_path, workspace)

    _progress("Cut complete", 1.0)
    return output_path
