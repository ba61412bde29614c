"""Shared test fixtures."""

import logging
import shutil
import subprocess
import sys
from fractions import Fraction
from pathlib import Path

import pytest

from keycut.models import MediaInfo

FIXTURES_DIR = Path(__file__).parent / "fixtures"
GENERATOR = Path(__file__).parent.parent / "scripts" / "generate_test_video.py"

# Keyframes of the 30 fps / 10 s reference video: one every two seconds
KEYFRAMES = [Fraction(t) for t in (0, 2, 4, 6, 8)]


def make_media(
    duration=10,
    fps=(30, 1),
    codec_name="h264",
    time_base_den=15360,
    has_audio=True,
) -> MediaInfo:
    return MediaInfo(
        codec_name=codec_name,
        time_base_den=time_base_den,
        fps=fps,
        duration=Fraction(duration),
        has_audio=has_audio,
    )


@pytest.fixture
def sample_manifest_path() -> Path:
    return FIXTURES_DIR / "sample_manifest.json"


@pytest.fixture
def media() -> MediaInfo:
    return make_media()


@pytest.fixture
def keyframes() -> list[Fraction]:
    return list(KEYFRAMES)


@pytest.fixture(scope="session")
def synthetic_video(tmp_path_factory) -> Path:
    """A real 10 s / 30 fps clip with keyframes every 2 s (needs ffmpeg)."""
    if shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None:
        pytest.skip("ffmpeg/ffprobe not on PATH")
    out = tmp_path_factory.mktemp("media") / "synthetic.mp4"
    subprocess.run([sys.executable, str(GENERATOR), str(out)], check=True, capture_output=True)
    return out


@pytest.fixture(autouse=True)
def _reset_keycut_logger():
    """Drop handlers setup_logging() bound to a captured stream."""
    yield
    log = logging.getLogger("keycut")
    for handler in list(log.handlers):
        log.removeHandler(handler)
    log.setLevel(logging.NOTSET)
