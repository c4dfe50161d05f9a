# stachekit/core/loaders.py
"""
Partial loaders: the "given a name, produce its text" capability.

A Context owns exactly one PartialLoader and clones it into every Template it
produces, so implementations must support independent duplication through
`clone()`. The base class deep-copies; override it when a loader holds
resources that cannot be copied that way.

DefaultLoader reads `{template_path}/{name}` from disk with the file
extension *replaced* by `template_extension`:

    "greeting"  -> greeting.mustache
    "foo.txt"   -> foo.mustache      (not foo.txt.mustache)
    "v1.2"      -> v1.mustache       (dotted names lose their last component)
    "foo."      -> foo.mustache      (a trailing dot is an empty extension)
    ".hidden"   -> .hidden.mustache  (a leading dot is not an extension)

A template that does not exist loads as an empty string while
`missing_as_empty` is set, so optional partials render as nothing.
"""
import copy
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Union
import structlog

from stachekit.exceptions import (
    InvalidNameError,
    LoaderError,
    TemplateDecodeError,
    TemplateNotFoundError,
)

log = structlog.get_logger(__name__)

TemplateName = Union[str, os.PathLike]

TEXT_ENCODING = "utf-8"


def coerce_name(name: TemplateName) -> str:
    """Returns `name` as a string path segment, or raises InvalidNameError."""
    if not isinstance(name, (str, os.PathLike)):
        raise InvalidNameError(f"template name must be a string or path, got {type(name).__name__}")
    name_str = os.fspath(name)
    if not isinstance(name_str, str):
        raise InvalidNameError(f"template name must decode to text, got {name_str!r}")
    if "\x00" in name_str:
        raise InvalidNameError(f"template name contains a NUL byte: {name_str!r}")
    return name_str


def replace_extension(path: Path, extension: str) -> Path:
    # mirrors a "set extension" on the final component: any existing
    # extension is dropped, an empty extension leaves the bare stem.
    if path.name in ("", ".", ".."):
        raise InvalidNameError(f"cannot set an extension on '{path}': it has no file name")
    # "foo." has an empty extension, ".hidden" has none.
    before_dot, _, _ = path.name.rpartition(".")
    stem = before_dot or path.name
    new_name = f"{stem}.{extension}" if extension else stem
    try:
        return path.with_name(new_name)
    except ValueError as e:
        raise InvalidNameError(f"cannot build a file name from '{path}' and extension '{extension}': {e}") from e


def decode_template_bytes(raw: bytes, name: str, path: Optional[Path] = None) -> str:
    # strict decoding: invalid content is an error, never replaced.
    try:
        return raw.decode(TEXT_ENCODING)
    except UnicodeDecodeError as e:
        where = str(path) if path is not None else name
        raise TemplateDecodeError(
            f"template '{name}' at {where} is not valid {TEXT_ENCODING} text: {e}",
            name=name, path=path,
        ) from e


class PartialLoader(ABC):
    """Resolves a template or partial name to its text."""

    @abstractmethod
    def load(self, name: TemplateName) -> str:
        """Returns the full text for `name`.

        Raises a StacheKitError subclass when the text cannot be produced.
        """

    def clone(self) -> "PartialLoader":
        """Returns an independent, equivalent copy of this loader."""
        return copy.deepcopy(self)


@dataclass(frozen=True)
class DefaultLoader(PartialLoader):
    """Loads `{template_path}/{name}.{template_extension}` from the file system.

    Args:
        template_path: Directory the names are resolved against.
        template_extension: Extension without the leading dot, e.g. "mustache".
        missing_as_empty: Return "" for names whose file does not exist
            instead of raising TemplateNotFoundError.
    """
    template_path: Path
    template_extension: str = "mustache"
    missing_as_empty: bool = True

    def __post_init__(self):
        object.__setattr__(self, "template_path", Path(self.template_path))
        if not self.template_extension:
            # degenerate but allowed: names resolve with their extension stripped
            log.warning("default_loader_empty_extension", template_path=str(self.template_path))

    def resolve(self, name: TemplateName) -> Path:
        """Returns the file location `name` maps to, without reading it."""
        candidate = self.template_path / coerce_name(name)
        return replace_extension(candidate, self.template_extension)

    def load(self, name: TemplateName) -> str:
        name_str = coerce_name(name)
        path = self.resolve(name_str)
        log.debug("loading_template_file", name=name_str, path=str(path))
        try:
            with path.open("rb") as template_file:
                raw = template_file.read()
        except FileNotFoundError as e:
            if self.missing_as_empty:
                log.debug("template_file_missing_loaded_as_empty", name=name_str, path=str(path))
                return ""
            raise TemplateNotFoundError(
                f"template '{name_str}' not found at {path}", name=name_str, path=path
            ) from e
        except OSError as e:
            raise LoaderError(
                f"failed to read template '{name_str}' from {path}: {e}", name=name_str, path=path
            ) from e
        return decode_template_bytes(raw, name_str, path)


@dataclass(frozen=True)
class DictLoader(PartialLoader):
    """Serves templates from an in-memory mapping of name to text.

    The mapping is copied on construction, so later changes to the caller's
    dict are not seen by the loader.
    """
    templates: Mapping[str, str] = field(default_factory=dict, hash=False)
    missing_as_empty: bool = True

    def __post_init__(self):
        copied: Dict[str, str] = {}
        for key, text in self.templates.items():
            if not isinstance(text, str):
                raise TypeError(f"template '{key}' must be str, got {type(text).__name__}")
            copied[coerce_name(key)] = text
        object.__setattr__(self, "templates", copied)

    def load(self, name: TemplateName) -> str:
        name_str = coerce_name(name)
        if name_str in self.templates:
            return self.templates[name_str]
        if self.missing_as_empty:
            log.debug("template_missing_from_mapping_loaded_as_empty", name=name_str)
            return ""
        raise TemplateNotFoundError(f"template '{name_str}' not found in mapping", name=name_str)
