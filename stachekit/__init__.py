# stachekit/__init__.py
"""
stachekit: compile mustache templates through a pluggable partial loader.

A Context owns a PartialLoader and turns template text (or a template name)
into a Template. The same loader resolves every partial the Template
references when it is rendered.
"""
__version__ = "0.3.0"

from .core.context import Context, DEFAULT_EXTENSION
from .core.loaders import PartialLoader, DefaultLoader, DictLoader
from .core.template import Template
from .exceptions import (
    StacheKitError,
    LoaderError,
    TemplateNotFoundError,
    TemplateDecodeError,
    ParseError,
    InvalidNameError,
    ConfigError,
)

__all__ = [
    "Context",
    "DEFAULT_EXTENSION",
    "PartialLoader",
    "DefaultLoader",
    "DictLoader",
    "Template",
    "StacheKitError",
    "LoaderError",
    "TemplateNotFoundError",
    "TemplateDecodeError",
    "ParseError",
    "InvalidNameError",
    "ConfigError",
    "__version__",
]
