"""Tests for the caret command line."""

import logging

import pytest
from rich.logging import RichHandler
from typer.testing import CliRunner

from caret.cli import app

runner = CliRunner()


@pytest.fixture
def script(tmp_path):
    path = tmp_path / "script.kts"
    path.write_text("val value = 1\nval vx = 2\nval z = vl")
    return path


@pytest.fixture
def model(tmp_path):
    path = tmp_path / "model.dsl"
    path.write_text("workspace {\n    mo")
    return path


class TestSuggest:
    """caret suggest prints suggestions for a file and caret."""

    def test_language_from_extension(self, model):
        """The language is guessed from the file extension."""
        result = runner.invoke(app, ["suggest", str(model), "--line", "2", "--column", "6"])
        assert result.exit_code == 0
        assert "model" in result.output

    def test_short_options(self, tmp_path):
        """-l and -c are accepted."""
        path = tmp_path / "script.kts"
        path.write_text("val x = 1\nval y = ")
        result = runner.invoke(app, ["suggest", str(path), "-l", "2", "-c", "8"])
        assert result.exit_code == 0
        assert "this" in result.output

    def test_explicit_language(self, tmp_path):
        """--language overrides the extension."""
        path = tmp_path / "model.txt"
        path.write_text("workspace {\n    mo")
        result = runner.invoke(app, ["suggest", str(path), "-l", "2", "-c", "6", "--language", "structurizr"])
        assert result.exit_code == 0
        assert "model" in result.output

    def test_fuzzy(self, script):
        """--fuzzy matches typed text as a subsequence."""
        result = runner.invoke(app, ["suggest", str(script), "-l", "3", "-c", "10", "--fuzzy"])
        assert result.exit_code == 0
        assert "value" in result.output
        assert "vx" not in result.output

    def test_no_suggestions(self, script):
        """No suggestions exits with 1."""
        result = runner.invoke(app, ["suggest", str(script), "-l", "3", "-c", "10"])
        assert result.exit_code == 1
        assert "No suggestions." in result.output

    def test_unknown_extension(self, tmp_path):
        """A file no language claims is a usage error."""
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        result = runner.invoke(app, ["suggest", str(path), "-l", "1", "-c", "0"])
        assert result.exit_code == 2

    def test_unknown_language(self, model):
        """An unknown --language is a usage error."""
        result = runner.invoke(app, ["suggest", str(model), "-l", "1", "-c", "0", "--language", "cobol"])
        assert result.exit_code == 2

    def test_missing_file(self, tmp_path):
        """An unreadable file is a usage error."""
        result = runner.invoke(app, ["suggest", str(tmp_path / "missing.dsl"), "-l", "1", "-c", "0"])
        assert result.exit_code == 2

    def test_line_must_be_positive(self, model):
        """Line numbers start at 1."""
        result = runner.invoke(app, ["suggest", str(model), "-l", "0", "-c", "0"])
        assert result.exit_code == 2


@pytest.fixture
def caret_logger():
    logger = logging.getLogger("caret")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestVerbose:
    """-v logs through one rich handler on the caret logger."""

    def test_handler_added_once(self, model, caret_logger):
        """Repeated verbose runs do not stack handlers."""
        for _ in range(3):
            result = runner.invoke(app, ["suggest", str(model), "-l", "2", "-c", "6", "-v"])
            assert result.exit_code == 0
        assert sum(isinstance(h, RichHandler) for h in caret_logger.handlers) == 1
        assert caret_logger.level == logging.DEBUG
