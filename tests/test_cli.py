"""Tests for the command line entry point."""

import sys
from fractions import Fraction
from pathlib import Path
from unittest.mock import patch

import pytest

from keycut.cli import main
from keycut.engine import EngineResult
from keycut.errors import EmptyRange, EngineFailure
from keycut.models import CutCase


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["keycut", *argv])
    main()


class TestArity:
    @pytest.mark.parametrize(
        "argv",
        [("cut",), ("cut", "1", "2", "in.mp4"), ("cut", "1", "2", "in.mp4", "out.mp4", "extra")],
    )
    def test_wrong_arity_exits_1(self, monkeypatch, capsys, argv):
        with pytest.raises(SystemExit) as excinfo:
            _run(monkeypatch, *argv)
        assert excinfo.value.code == 1
        assert "Usage" in capsys.readouterr().err

    def test_unknown_option_exits_1(self, monkeypatch):
        with pytest.raises(SystemExit) as excinfo:
            _run(monkeypatch, "cut", "--bogus")
        assert excinfo.value.code == 1

    def test_no_command_prints_help(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as excinfo:
            _run(monkeypatch)
        assert excinfo.value.code == 0
        assert "keycut" in capsys.readouterr().out


class TestCut:
    @patch("keycut.engine.process")
    def test_success(self, mock_process, monkeypatch, capsys):
        mock_process.return_value = EngineResult(
            output_path=Path("out.mp4"),
            case=CutCase.SPLIT_GOP,
            duration_requested=Fraction(2),
            duration_final=Fraction(2),
        )
        _run(monkeypatch, "cut", "3", "5", "in.mp4", "out.mp4")

        manifest = mock_process.call_args[0][0]
        assert (manifest.start, manifest.end) == ("3", "5")
        assert manifest.input == Path("in.mp4")
        out = capsys.readouterr().out
        assert "Done! Output: out.mp4" in out
        assert "split_gop" in out

    @patch("keycut.engine.process")
    def test_keycut_error_exits_1(self, mock_process, monkeypatch, capsys):
        mock_process.side_effect = EmptyRange("empty or inverted range: start '5', end '5'")
        with pytest.raises(SystemExit) as excinfo:
            _run(monkeypatch, "cut", "5", "5", "in.mp4", "out.mp4")
        assert excinfo.value.code == 1
        err = capsys.readouterr().err.strip().splitlines()
        assert err == ["error: resolve: empty or inverted range: start '5', end '5'"]

    @patch("keycut.engine.process")
    def test_engine_failure_exits_1(self, mock_process, monkeypatch, capsys):
        mock_process.side_effect = EngineFailure("concat", 1)
        with pytest.raises(SystemExit) as excinfo:
            _run(monkeypatch, "cut", "3", "5", "in.mp4", "out.mp4")
        assert excinfo.value.code == 1
        assert "concat: ffmpeg exited with status 1" in capsys.readouterr().err

    def test_malformed_token_exits_1(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as excinfo:
            _run(monkeypatch, "cut", "1:2:3:4", "5", "in.mp4", "out.mp4")
        assert excinfo.value.code == 1
        assert "too many parts" in capsys.readouterr().err

    @patch("keycut.engine.process")
    def test_manifest(self, mock_process, monkeypatch, sample_manifest_path):
        mock_process.return_value = EngineResult(
            output_path=Path("clip.mp4"), case=CutCase.ON_KEYFRAME
        )
        _run(monkeypatch, "cut", "--manifest", str(sample_manifest_path))
        assert mock_process.call_args[0][0].start == "f90"

    def test_manifest_and_positionals_conflict(self, monkeypatch, sample_manifest_path):
        with pytest.raises(SystemExit) as excinfo:
            _run(monkeypatch, "cut", "1", "--manifest", str(sample_manifest_path))
        assert excinfo.value.code == 1


class TestBurn:
    @patch("keycut.editors.burn.apply_frame_burn")
    def test_burn(self, mock_burn, monkeypatch, capsys):
        mock_burn.return_value.output_path = Path("in_frameinfo.mp4")
        _run(monkeypatch, "burn", "in.mp4")
        assert mock_burn.call_args[0][0] == Path("in.mp4")
        assert "in_frameinfo.mp4" in capsys.readouterr().out
