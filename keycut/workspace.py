"""Per-run scratch directory for intermediate media files."""

import os
import shutil
import tempfile
from pathlib import Path

from keycut.logging_config import logger


class Workspace:
    """Owns every intermediate file of one run.

    Use as a context manager; the directory and everything in it is removed
    on exit, whether the run succeeded, failed or was interrupted. Directory
    names carry the process id so concurrent runs never share state.
    """

    def __init__(self, suffix: str, root: Path | None = None) -> None:
        # Intermediates share the input's container so concatenation is clean
        self.suffix = suffix
        self.root = root
        self.dir: Path | None = None
        self._names: set[str] = set()

    def __enter__(self) -> "Workspace":
        if self.root is not None:
            Path(self.root).mkdir(parents=True, exist_ok=True)
        self.dir = Path(tempfile.mkdtemp(prefix=f"keycut_{os.getpid()}_", dir=self.root))
        logger.debug("Workspace created at %s", self.dir)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def path(self, name: str, suffix: str | None = None) -> Path:
        """Return a fresh path inside the workspace."""
        if self.dir is None:
            raise RuntimeError("Workspace used outside of its context")
        filename = name + (self.suffix if suffix is None else suffix)
        if filename in self._names:
            raise ValueError(f"workspace path {filename!r} already handed out")
        self._names.add(filename)
        return self.dir / filename

    def discard(self, *paths: Path) -> None:
        """Delete intermediates that later stages no longer need."""
        for p in paths:
            Path(p).unlink(missing_ok=True)

    def cleanup(self) -> None:
        if self.dir is None:
            return
        try:
            shutil.rmtree(self.dir)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove workspace %s: %s", self.dir, exc)
        else:
            logger.debug("Workspace %s removed", self.dir)
        self.dir = None
        self._names.clear()
