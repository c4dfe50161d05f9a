# stachekit/core/output.py
"""
Delivers rendered template text to stdout or to a file.
"""
import sys
from pathlib import Path
from typing import Optional
import structlog
from stachekit.exceptions import OutputError

log = structlog.get_logger(__name__)

def emit_rendered(rendered: str, output_file: Optional[Path] = None) -> str:
    """Writes `rendered` to `output_file`, or stdout when none is given.

    Returns a description of the destination for user-facing messages.
    """
    if output_file is None:
        _write_stdout(rendered)
        destination = "stdout"
    else:
        try:
            output_file.write_text(rendered, encoding="utf-8")
        except OSError as e:
            raise OutputError(f"failed to write rendered template to '{output_file}': {e}") from e
        destination = str(output_file)
    log.info("rendered_output_written", destination=destination, chars=len(rendered))
    return destination

def _write_stdout(rendered: str):
    try:
        sys.stdout.write(rendered)
    except UnicodeEncodeError as e:
        # terminals with a narrow encoding still get the bytes, with replacements
        log.warning("stdout_encoding_rejected_rendered_text", encoding=sys.stdout.encoding, error=str(e))
        sys.stdout.buffer.write(rendered.encode("utf-8", errors="replace"))
    sys.stdout.flush()
