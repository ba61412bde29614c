#!/usr/bin/env python3
"""Generate a synthetic test video for Keycut cut testing.

Produces a 10-second 30 fps H.264 video (300 frames) with a keyframe exactly
every 2 seconds (0, 2, 4, 6, 8) and a 440 Hz AAC tone, so every cut case can
be exercised:
  [4, 6)   lands on a keyframe
  [3, 3.5) stays inside one GOP
  [3, 5)   splits a GOP
"""

import subprocess
import sys
from pathlib import Path


def generate_test_video(output: Path, duration: int = 10, fps: int = 30, gop_seconds: int = 2) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    gop = fps * gop_seconds

    cmd = [
        "ffmpeg", "-y",
        "-f", "lavfi", "-i", f"testsrc=size=320x240:rate={fps}:duration={duration}",
        "-f", "lavfi", "-i", f"sine=frequency=440:duration={duration}",
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        "-g", str(gop),
        "-keyint_min", str(gop),
        "-sc_threshold", "0",
        "-bf", "0",
        "-c:a", "aac",
        "-shortest",
        str(output),
    ]
    subprocess.run(cmd, check=True, capture_output=True)
    print(f"Generated: {output}")


if __name__ == "__main__":
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("tests/fixtures/synthetic.mp4")
    generate_test_video(out)
