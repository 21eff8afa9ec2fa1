"""Caret CLI - grammar-driven code completion.

Commands:
    caret suggest <file> --line L --column C   Print suggestions at a caret
    caret repl --language kotlin               Interactive prompt with completion
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.columns import Columns
from rich.console import Console
from rich.logging import RichHandler

from caret.engine import CompletionEngine
from caret.exceptions import CaretError
from caret.languages import Language, language_for_path, parse_language
from caret.matching import fuzzy
from caret.position import CaretPosition

app = typer.Typer(
    name="caret",
    help="Grammar-driven code completion for an architecture DSL and a Kotlin-like language",
    no_args_is_help=True,
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logger = logging.getLogger("caret")
    logger.setLevel(logging.DEBUG)
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return
    logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


def _engine(language: str | Language, use_fuzzy: bool) -> CompletionEngine:
    try:
        engine = CompletionEngine(language)
    except CaretError as e:
        raise typer.BadParameter(str(e))
    if use_fuzzy:
        engine.set_token_matcher(fuzzy)
    return engine


@app.command("suggest")
def suggest(
    file: Annotated[Path, typer.Argument(help="Source file to complete in")],
    line: Annotated[int, typer.Option("--line", "-l", min=1, help="1-based caret line")],
    column: Annotated[int, typer.Option("--column", "-c", min=0, help="0-based caret column")],
    language: Annotated[
        Optional[str],
        typer.Option("--language", help="Language name; guessed from the file extension if omitted"),
    ] = None,
    use_fuzzy: Annotated[bool, typer.Option("--fuzzy", help="Match typed text as a subsequence")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log parsing and analysis")] = False,
):
    """Print completion suggestions for a caret position in FILE.

    Examples:
        caret suggest model.dsl --line 3 --column 4
        caret suggest script.kts -l 2 -c 8 --fuzzy
    """
    _configure_logging(verbose)
    try:
        code = file.read_text(encoding="utf-8")
    except OSError as e:
        raise typer.BadParameter(f"Cannot read {file}: {e}")

    try:
        lang = parse_language(language) if language else language_for_path(file)
    except CaretError as e:
        raise typer.BadParameter(str(e))

    suggestions = _engine(lang, use_fuzzy).suggest(code, CaretPosition(line=line, column=column))
    if not suggestions:
        typer.echo("No suggestions.", err=True)
        raise typer.Exit(1)
    console.print(Columns(suggestions, equal=True, expand=False))


@app.command("repl")
def repl(
    language: Annotated[str, typer.Option("--language", help="Language to complete")] = Language.KOTLIN.value,
    use_fuzzy: Annotated[bool, typer.Option("--fuzzy", help="Match typed text as a subsequence")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log parsing and analysis")] = False,
):
    """Type source line by line with live completion; Ctrl-D prints the buffer."""
    from prompt_toolkit import PromptSession
    from prompt_toolkit.lexers import PygmentsLexer
    from pygments.lexers import get_lexer_by_name

    from caret.complete import GrammarCompleter

    _configure_logging(verbose)
    engine = _engine(language, use_fuzzy)
    lines: list[str] = []

    lexer = None
    if engine.support.pygments_lexer:
        lexer = PygmentsLexer(type(get_lexer_by_name(engine.support.pygments_lexer)))

    session = PromptSession(
        completer=GrammarCompleter(engine, preamble=lambda: "".join(f"{line}\n" for line in lines)),
        lexer=lexer,
        complete_while_typing=True,
    )
    while True:
        try:
            lines.append(session.prompt(f"{engine.language.value}> "))
        except KeyboardInterrupt:
            continue
        except EOFError:
            break
    console.print("\n".join(lines), highlight=False)


def main():
    app()


if __name__ == "__main__":
    main()
