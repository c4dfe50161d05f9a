# stachekit/exceptions.py
from pathlib import Path
from typing import Optional


class StacheKitError(Exception):
    # base exception for all stachekit errors.
    pass


class LoaderError(StacheKitError):
    # a template or partial could not be read from its backing store.
    def __init__(self, message: str, name: Optional[str] = None, path: Optional[Path] = None):
        super().__init__(message)
        self.name = name
        self.path = path


class TemplateNotFoundError(LoaderError):
    # raised only by loaders configured to treat missing templates as fatal.
    pass


class TemplateDecodeError(StacheKitError):
    # template content exists but is not valid text. not a LoaderError.
    def __init__(self, message: str, name: Optional[str] = None, path: Optional[Path] = None):
        super().__init__(message)
        self.name = name
        self.path = path


class ParseError(StacheKitError):
    # errors raised by the mustache tokenizer.
    pass


class InvalidNameError(StacheKitError, ValueError):
    # a template name that cannot be interpreted as a path.
    pass


class ConfigError(StacheKitError):
    # errors related to configuration.
    pass


class OutputError(StacheKitError):
    # errors during output operations.
    pass
