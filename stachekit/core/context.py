# stachekit/core/context.py
"""
The compilation context: the loader configuration shared by compilation and
by every Template compiled from it.

    context = Context.new(Path("templates"))
    template = context.compile_path("greeting")   # templates/greeting.mustache
    template.render({"name": "World"})
"""
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Union
import structlog

from .compiler import Compiler
from .loaders import DefaultLoader, PartialLoader, TemplateName
from .template import Template

if TYPE_CHECKING:
    from stachekit.config.settings import EngineConfig

log = structlog.get_logger(__name__)

DEFAULT_EXTENSION = "mustache"


@dataclass(frozen=True)
class Context:
    """Holds the PartialLoader used to fetch templates and their partials."""
    partial_loader: PartialLoader

    @classmethod
    def new(cls, path: Union[str, Path]) -> "Context":
        """Context reading `{path}/{name}.mustache` files."""
        return cls(DefaultLoader(Path(path), DEFAULT_EXTENSION))

    @classmethod
    def with_extension(cls, path: Union[str, Path], extension: str) -> "Context":
        """Context reading `{path}/{name}.{extension}` files."""
        return cls(DefaultLoader(Path(path), extension))

    @classmethod
    def with_loader(cls, loader: PartialLoader) -> "Context":
        """Context using a caller-supplied loader."""
        if not isinstance(loader, PartialLoader):
            raise TypeError(f"loader must be a PartialLoader, got {type(loader).__name__}")
        return cls(loader)

    @classmethod
    def from_config(cls, config: "EngineConfig") -> "Context":
        return cls(DefaultLoader(
            Path(config.template_path),
            config.template_extension,
            missing_as_empty=config.missing_as_empty,
        ))

    def clone(self) -> "Context":
        return Context(self.partial_loader.clone())

    def compile(self, source: Iterable[str]) -> Template:
        """Compiles template text already in hand.

        `source` is a string or any iterable of characters/string pieces.
        Raises ParseError if the text is not a valid template.
        """
        body = source if isinstance(source, str) else "".join(source)
        tokens, partials = Compiler(self.clone(), body).compile()
        return Template(self.clone(), tokens, partials)

    def compile_path(self, path: TemplateName) -> Template:
        """Loads `path` through the partial loader and compiles the result.

        Loader errors propagate unchanged. With the default loader, a missing
        file compiles to an empty template.
        """
        log.debug("compiling_template_by_name", name=str(path))
        text = self.partial_loader.load(path)
        return self.compile(text)
