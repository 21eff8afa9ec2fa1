"""prompt_toolkit completer backed by a CompletionEngine.

Drop GrammarCompleter into any PromptSession to get grammar-aware
completion for one of caret's languages.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from caret.engine import CompletionEngine
from caret.position import CaretPosition

# Matched against the reversed text before the cursor.
_WORD_BEFORE_CURSOR = re.compile(r"^[A-Za-z0-9_]+")


class GrammarCompleter(Completer):
    """Completes the document with suggestions from ``engine``.

    ``preamble`` returns source text that logically precedes the document,
    such as lines already entered in a REPL; it must be empty or end with
    a newline.
    """

    def __init__(self, engine: CompletionEngine, preamble: Callable[[], str] | None = None) -> None:
        self.engine = engine
        self._preamble = preamble or (lambda: "")

    def get_completions(self, document: Document, complete_event) -> Iterator[Completion]:
        preamble = self._preamble()
        caret = CaretPosition(
            line=preamble.count("\n") + document.cursor_position_row + 1,
            column=document.cursor_position_col,
        )
        word = document.get_word_before_cursor(pattern=_WORD_BEFORE_CURSOR)
        for suggestion in self.engine.suggest(preamble + document.text, caret):
            yield Completion(suggestion, start_position=-len(word))
