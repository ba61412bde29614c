"""FFmpeg/ffprobe subprocess helpers.

The inspector half (``probe``, ``scan_keyframes``, ``measure_duration``,
``count_frames``) reads metadata; the engine half issues one ffmpeg command
per stage and raises :class:`EngineFailure` when it exits non-zero.
"""

import json
import shlex
import shutil
import subprocess
import tempfile
from collections.abc import Iterator
from fractions import Fraction
from pathlib import Path

from keycut.errors import EngineFailure, FFmpegNotFoundError, ProbeFailure
from keycut.logging_config import logger
from keycut.models import MediaInfo
from keycut.timeparse import format_seconds

def check_ffmpeg() -> None:
    """Raise FFmpegNotFoundError if ffmpeg/ffprobe are not on PATH."""
    for cmd in ("ffmpeg", "ffprobe"):
        if shutil.which(cmd) is None:
            raise FFmpegNotFoundError(f"{cmd} not found on PATH")


def _last_line(text: str | None) -> str:
    """Return the last non-empty line of ffmpeg's stderr."""
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
    return lines[-1] if lines else ""


def _run(stage: str, cmd: list[str], input_path: Path) -> subprocess.CompletedProcess:
    """Run one engine command; non-zero exit becomes EngineFailure(stage)."""
    logger.debug("[%s] %s", stage, shlex.join(cmd))
    try:
        return subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as exc:
        raise EngineFailure(
            stage, exc.returncode, _last_line(exc.stderr), input_path=input_path
        ) from exc


def _probe_output(cmd: list[str], input_path: Path) -> str:
    logger.debug("[probe] %s", shlex.join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as exc:
        raise ProbeFailure(
            f"ffprobe failed on {input_path} (rc={exc.returncode}): {_last_line(exc.stderr)}"
        ) from exc
    return result.stdout


def _parse_frame_rate(raw: str) -> tuple[int, int] | None:
    """Parse ffprobe's ``r_frame_rate`` (``30000/1001`` or ``25``)."""
    num_str, _, den_str = raw.partition("/")
    try:
        num, den = int(num_str), int(den_str or 1)
    except ValueError as exc:
        raise ProbeFailure(f"unreadable frame rate {raw!r}") from exc
    if num <= 0 or den <= 0:
        return None
    return num, den


def probe(input_path: Path) -> MediaInfo:
    """Extract the metadata the cut planner needs via ffprobe."""
    cmd = [
        "ffprobe",
        "-v", "error",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(input_path),
    ]
    stdout = _probe_output(cmd, input_path)
    try:
        data = json.loads(stdout)
    except json.JSONDecodeError as exc:
        raise ProbeFailure(f"ffprobe returned invalid JSON for {input_path}") from exc

    streams = data.get("streams", [])
    video_stream = next((s for s in streams if s.get("codec_type") == "video"), None)
    has_audio = any(s.get("codec_type") == "audio" for s in streams)

    if video_stream is None:
        raise ProbeFailure(f"No video stream found in {input_path}")

    missing = [
        key for key in ("codec_name", "time_base", "r_frame_rate")
        if not video_stream.get(key)
    ]
    duration = data.get("format", {}).get("duration")
    if duration in (None, "", "N/A"):
        missing.append("duration")
    if missing:
        raise ProbeFailure(f"ffprobe did not report {', '.join(missing)} for {input_path}")

    _, _, tb_den = video_stream["time_base"].partition("/")
    try:
        time_base_den = int(tb_den or 1)
        duration_s = Fraction(duration)
    except ValueError as exc:
        raise ProbeFailure(f"unreadable time base or duration in {input_path}") from exc

    return MediaInfo(
        codec_name=video_stream["codec_name"],
        time_base_den=time_base_den,
        fps=_parse_frame_rate(video_stream["r_frame_rate"]),
        duration=duration_s,
        has_audio=has_audio,
    )


def _parse_compact_line(line: str) -> dict[str, str]:
    fields = {}
    for item in line.strip().split("|"):
        key, sep, value = item.partition("=")
        if sep:
            fields[key] = value
    return fields


def scan_keyframes(input_path: Path) -> Iterator[Fraction]:
    """Yield intra-frame timestamps in presentation order.

    ffprobe only decodes keyframes (``-skip_frame nokey``) and output is read
    line by line, so a caller that stops early never waits for a full scan.
    Closing the generator kills ffprobe.
    """
    cmd = [
        "ffprobe",
        "-v", "error",
        "-select_streams", "v:0",
        "-skip_frame", "nokey",
        "-show_entries", "frame=best_effort_timestamp_time,pict_type",
        "-of", "compact=p=0",
        str(input_path),
    ]
    logger.debug("[keyframes] %s", shlex.join(cmd))
    # Spool stderr to a file so ffprobe never blocks on a full pipe
    with tempfile.TemporaryFile(mode="w+") as errfile, subprocess.Popen(
        cmd, stdout=subprocess.PIPE, stderr=errfile, text=True
    ) as proc:
        try:
            for line in proc.stdout:
                fields = _parse_compact_line(line)
                if fields.get("pict_type") != "I":
                    continue
                ts = fields.get("best_effort_timestamp_time")
                if ts in (None, "", "N/A"):
                    continue
                yield Fraction(ts)
        except GeneratorExit:
            proc.kill()
            raise
        returncode = proc.wait()
        errfile.seek(0)
        stderr = errfile.read()

    if returncode != 0:
        raise ProbeFailure(
            f"keyframe scan failed on {input_path} (rc={returncode}): {_last_line(stderr)}"
        )


def measure_duration(input_path: Path) -> Fraction:
    """Return the container duration of *input_path* in seconds."""
    cmd = [
        "ffprobe",
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(input_path),
    ]
    raw = _probe_output(cmd, input_path).strip()
    try:
        return Fraction(raw)
    except ValueError as exc:
        raise ProbeFailure(f"unreadable duration {raw!r} for {input_path}") from exc


def count_frames(input_path: Path) -> int:
    """Decode the first video stream and count its frames."""
    cmd = [
        "ffprobe",
        "-v", "error",
        "-select_streams", "v:0",
        "-count_frames",
        "-show_entries", "stream=nb_read_frames",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(input_path),
    ]
    raw = _probe_output(cmd, input_path).strip()
    if not raw.isdigit():
        raise ProbeFailure(f"unreadable frame count {raw!r} for {input_path}")
    return int(raw)


# ---------------------------------------------------------------------------
# Engine commands
# ---------------------------------------------------------------------------


def reencode_segment(
    input_path: Path,
    seek: Fraction,
    start_offset: Fraction,
    end_offset: Fraction,
    codec: str,
    time_base_den: int,
    output_path: Path,
) -> None:
    """Re-encode video only, with a coarse input seek then an exact output seek.

    *start_offset* and *end_offset* are relative to *seek*.
    """
    cmd = [
        "ffmpeg", "-y",
        "-ss", format_seconds(seek),
        "-i", str(input_path),
        "-ss", format_seconds(start_offset),
        "-to", format_seconds(end_offset),
        "-c:v", codec,
        "-an",
        "-strict", "-2",
        "-video_track_timescale", str(time_base_den),
        str(output_path),
    ]
    _run("reencode", cmd, input_path)


def copy_segment(
    input_path: Path, start: Fraction, end: Fraction, output_path: Path
) -> None:
    """Stream-copy the video between absolute *start* and *end*, no audio."""
    cmd = [
        "ffmpeg", "-y",
        "-i", str(input_path),
        "-ss", format_seconds(start),
        "-to", format_seconds(end),
        "-c:v", "copy",
        "-an",
        str(output_path),
    ]
    _run("copy", cmd, input_path)


def write_concat_list(paths: list[Path], list_path: Path) -> Path:
    """Write an ffmpeg concat-demuxer list file."""
    if not paths:
        raise ValueError("write_concat_list called with empty path list")
    lines = []
    for p in paths:
        escaped = str(Path(p).resolve()).replace("'", "'\\''")
        lines.append(f"file '{escaped}'")
    list_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return list_path


def concat_segments(list_path: Path, output_path: Path) -> None:
    """Concatenate the files named in *list_path* without re-encoding."""
    cmd = [
        "ffmpeg", "-y",
        "-f", "concat",
        "-safe", "0",
        "-i", str(list_path),
        "-c", "copy",
        "-copyts",
        str(output_path),
    ]
    _run("concat", cmd, list_path)


def extract_audio(
    input_path: Path, start: Fraction, duration: Fraction, output_path: Path
) -> None:
    """Stream-copy the audio starting at *start* for exactly *duration*."""
    cmd = [
        "ffmpeg", "-y",
        "-i", str(input_path),
        "-ss", format_seconds(start),
        "-t", format_seconds(duration),
        "-vn",
        "-c:a", "copy",
        str(output_path),
    ]
    _run("extract-audio", cmd, input_path)


def mux(video_path: Path, audio_path: Path | None, output_path: Path) -> None:
    """Mux the video intermediate with the extracted audio, both copied."""
    cmd = ["ffmpeg", "-y", "-i", str(video_path)]
    if audio_path is not None:
        cmd += ["-i", str(audio_path), "-c:v", "copy", "-c:a", "copy"]
    else:
        cmd += ["-c", "copy"]
    cmd.append(str(output_path))
    _run("mux", cmd, video_path)


def burn_frame_info(
    input_path: Path,
    output_path: Path,
    fontfile: Path | None = None,
    fontsize: int = 24,
) -> None:
    """Hard-burn the frame number and timestamp onto every frame."""
    drawtext = [
        r"text='Frame\: %{n} | Time\: %{pts\:hms}'",
        "fontcolor=white",
        f"fontsize={fontsize}",
        "box=1",
        "boxcolor=black@0.7",
        "boxborderw=5",
        "x=10",
        "y=10",
    ]
    if fontfile is not None:
        drawtext.insert(0, f"fontfile={fontfile}")

    cmd = [
        "ffmpeg", "-y",
        "-i", str(input_path),
        "-vf", "drawtext=" + ":".join(drawtext),
        "-c:v", "libx264",
        "-preset", "ultrafast",
        "-crf", "23",
        "-c:a", "copy",
        str(output_path),
    ]
    _run("burn", cmd, input_path)
