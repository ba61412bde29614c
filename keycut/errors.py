"""Error taxonomy. Every error is terminal for the run that raised it."""


class KeycutError(RuntimeError):
    """Base error; ``stage`` names the pipeline step that failed."""

    stage = "keycut"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"{self.stage}: {super().__str__()}"


class InvalidTimeFormat(KeycutError, ValueError):
    stage = "parse"


class MissingFrameRate(KeycutError, ValueError):
    stage = "parse"


class ProbeFailure(KeycutError):
    stage = "probe"


class FFmpegNotFoundError(ProbeFailure):
    pass


class EmptyRange(KeycutError, ValueError):
    stage = "resolve"


class NoKeyframeFound(KeycutError):
    stage = "resolve"


class EngineFailure(KeycutError):
    """Raised when an ffmpeg invocation exits non-zero."""

    def __init__(
        self, stage: str, returncode: int, detail: str = "", input_path=None
    ) -> None:
        message = f"ffmpeg exited with status {returncode}"
        if input_path is not None:
            message += f" on {input_path}"
        if detail:
            message += f": {detail}"
        super().__init__(message, stage=stage)
        self.returncode = returncode
        self.detail = detail
        self.input_path = input_path
