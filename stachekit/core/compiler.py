# stachekit/core/compiler.py
"""
Turns mustache source text into a token stream and the list of partials it
references, using chevron's tokenizer.
"""
from typing import TYPE_CHECKING, List, Tuple
from chevron.tokenizer import ChevronError, tokenize
import structlog

from stachekit.exceptions import ParseError

if TYPE_CHECKING:
    from .context import Context

log = structlog.get_logger(__name__)

Token = Tuple[str, str]


class Compiler:
    """Compiles one template body for a Context.

    The context is held so a compiler can be handed the same resolution
    configuration the resulting Template will use; tokenizing itself never
    touches the loader.
    """
    def __init__(self, context: "Context", source: str):
        self.context = context
        self.source = source

    def compile(self) -> Tuple[Tuple[Token, ...], Tuple[str, ...]]:
        """Returns (tokens, partial names), partials in order of first reference."""
        try:
            tokens = tuple(tokenize(self.source))
        except ChevronError as e:
            log.debug("template_tokenize_failed", error=str(e))
            raise ParseError(f"failed to parse template: {e}") from e

        partials: List[str] = []
        for tag_type, key in tokens:
            if tag_type == "partial" and key not in partials:
                partials.append(key)
        log.debug("template_compiled", token_count=len(tokens), partials=partials)
        return tokens, tuple(partials)
