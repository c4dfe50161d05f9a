# stachekit/core/__init__.py
"""
Core compilation pieces: loaders, the compiler adapter, templates and the
compilation context that ties them together.
"""
from .loaders import PartialLoader, DefaultLoader, DictLoader
from .compiler import Compiler
from .template import Template
from .context import Context, DEFAULT_EXTENSION

__all__ = [
    "PartialLoader",
    "DefaultLoader",
    "DictLoader",
    "Compiler",
    "Template",
    "Context",
    "DEFAULT_EXTENSION",
]
