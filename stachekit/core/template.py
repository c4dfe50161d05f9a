# stachekit/core/template.py
"""
A compiled template: a token stream plus the partial names it references,
bound to its own copy of the Context that produced it.

Partials are loaded through the context's loader the first time a render
needs them and kept on the Template afterwards.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, TextIO, Tuple
import chevron
from chevron.tokenizer import ChevronError
import structlog

from stachekit.exceptions import LoaderError, ParseError

if TYPE_CHECKING:
    from .context import Context

log = structlog.get_logger(__name__)


class _PartialSource(Mapping):
    # the partials mapping handed to chevron; every lookup goes through the loader.
    def __init__(self, template: "Template"):
        self._template = template

    def __getitem__(self, name: str) -> str:
        try:
            return self._template.load_partial(name)
        except KeyError as e:
            # chevron reads a KeyError as "not in the dict" and falls back to the
            # file system, which would bypass the loader.
            raise LoaderError(f"loader failed to resolve partial '{name}': {e!r}", name=name) from e

    def __iter__(self) -> Iterator[str]:
        return iter(self._template._materialized)

    def __len__(self) -> int:
        return len(self._template._materialized)


@dataclass(frozen=True)
class Template:
    context: "Context"
    tokens: Tuple[Tuple[str, str], ...]
    partials: Tuple[str, ...]
    _materialized: Dict[str, str] = field(default_factory=dict, init=False, repr=False, compare=False)

    def load_partial(self, name: str) -> str:
        """Returns the text of partial `name`, loading it on first use."""
        if name not in self._materialized:
            log.debug("materializing_partial", name=name)
            self._materialized[name] = self.context.partial_loader.load(name)
        return self._materialized[name]

    def load_partials(self) -> Dict[str, str]:
        """Loads every partial this template references directly."""
        return {name: self.load_partial(name) for name in self.partials}

    def render(self, data: Optional[Any] = None, *, warn: bool = False) -> str:
        """Renders the template against `data` (a dict, list or scalar).

        Partial text is tokenized as it is reached, so a malformed partial
        raises ParseError here rather than at compile time.
        """
        try:
            return chevron.render(
                template=list(self.tokens),
                data={} if data is None else data,
                partials_dict=_PartialSource(self),
                warn=warn,
            )
        except ChevronError as e:
            log.debug("partial_tokenize_failed", error=str(e))
            raise ParseError(f"failed to parse partial: {e}") from e

    def render_to(self, writer: TextIO, data: Optional[Any] = None, *, warn: bool = False) -> None:
        writer.write(self.render(data, warn=warn))
