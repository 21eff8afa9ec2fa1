"""Prefix filtering of completion candidates."""

from __future__ import annotations

from collections.abc import Callable, Sequence

TokenMatcher = Callable[[str, Sequence[str]], list[str]]
"""Decides which candidates survive for the text typed so far."""


def starts_with(text: str, candidates: Sequence[str]) -> list[str]:
    """Candidates starting with ``text``, ignoring case, in input order.

    Blank ``text`` keeps every candidate.
    """
    if not text.strip():
        return list(candidates)
    prefix = text.lower()
    return [c for c in candidates if c.lower().startswith(prefix)]


def fuzzy(text: str, candidates: Sequence[str]) -> list[str]:
    """Candidates containing the characters of ``text`` in order, ignoring case.

    ``"vr"`` keeps ``"var"`` and ``"variable"``. Blank ``text`` keeps every
    candidate; order is preserved.
    """
    if not text.strip():
        return list(candidates)
    needle = text.lower()
    return [c for c in candidates if _is_subsequence(needle, c.lower())]


def _is_subsequence(needle: str, haystack: str) -> bool:
    it = iter(haystack)
    return all(ch in it for ch in needle)


def filter_tokens(text: str, candidates: Sequence[str], matcher: TokenMatcher = starts_with) -> list[str]:
    """Apply ``matcher`` to ``candidates`` for the typed ``text``."""
    return matcher(text, candidates)
