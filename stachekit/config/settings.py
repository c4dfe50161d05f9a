from dataclasses import dataclass, field
from pathlib import Path

from stachekit.core.context import DEFAULT_EXTENSION as DEFAULT_TEMPLATE_EXTENSION

@dataclass
class EngineConfig:
    # holds the template resolution and rendering settings for a run.
    template_path: Path = field(default_factory=lambda: Path("."))
    template_extension: str = DEFAULT_TEMPLATE_EXTENSION
    missing_as_empty: bool = True
    warn_missing_keys: bool = False

    def __post_init__(self):
        self.template_path = Path(self.template_path)
