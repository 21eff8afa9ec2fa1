"""Registry of supported languages.

Each language module exposes a ``SUPPORT`` object bundling its grammar,
translator, symbol declarations and file extensions. Modules are imported
on first use.
"""

from __future__ import annotations

import importlib
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from caret.exceptions import UnknownLanguageError

if TYPE_CHECKING:
    from caret.grammar import Grammar
    from caret.symbols import Declaration
    from caret.translate import Translator


class Language(Enum):
    """Languages caret can complete."""

    STRUCTURIZR = "structurizr"
    KOTLIN = "kotlin"


@dataclass(frozen=True)
class LanguageSupport:
    """Everything the completion engine needs for one language."""

    language: Language
    grammar: Grammar
    translator: Translator
    declarations: Mapping[str, Declaration]
    extensions: tuple[str, ...] = ()
    pygments_lexer: str | None = None


_MODULES: dict[Language, str] = {
    Language.STRUCTURIZR: "caret.languages.structurizr",
    Language.KOTLIN: "caret.languages.kotlin",
}


def parse_language(name: str | Language) -> Language:
    """Resolve a language name (case-insensitive) to a Language.

    Raises:
        UnknownLanguageError: If no language has that name.
    """
    if isinstance(name, Language):
        return name
    try:
        return Language(name.strip().lower())
    except ValueError as e:
        known = ", ".join(lang.value for lang in Language)
        raise UnknownLanguageError(f"Unknown language {name!r} (known: {known})", name=name, cause=e)


def get_support(language: str | Language) -> LanguageSupport:
    """Support bundle for ``language``, importing its module on first use."""
    language = parse_language(language)
    return importlib.import_module(_MODULES[language]).SUPPORT


def language_for_path(path: str | Path) -> Language:
    """Language of a source file, chosen by extension.

    Raises:
        UnknownLanguageError: If no language claims the extension.
    """
    suffix = Path(path).suffix.lower()
    for language in Language:
        if suffix in get_support(language).extensions:
            return language
    raise UnknownLanguageError(f"No language registered for {suffix or 'files without extension'!r}", name=suffix)
