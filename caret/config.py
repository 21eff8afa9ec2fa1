"""Request-scoped completion configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from caret.matching import TokenMatcher, starts_with


class CompletionConfig(BaseModel):
    """Settings one completion request runs with.

    Immutable; derive variants with the ``with_*`` helpers so concurrent
    requests never share mutable state.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    matcher: TokenMatcher = starts_with

    def with_matcher(self, matcher: TokenMatcher) -> CompletionConfig:
        """Copy of this config filtering with ``matcher``."""
        return self.model_copy(update={"matcher": matcher})


DEFAULT_CONFIG = CompletionConfig()
