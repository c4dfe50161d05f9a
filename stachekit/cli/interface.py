# stachekit/cli/interface.py
import sys
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from click_option_group import optgroup
import structlog
import toml

from stachekit import __version__ as app_version
from stachekit.config.loader import load_and_merge_configs, build_engine_config
from stachekit.config.settings import EngineConfig, DEFAULT_TEMPLATE_EXTENSION
from stachekit.core.context import Context
from stachekit.core.output import emit_rendered
from stachekit.exceptions import StacheKitError, ConfigError
from stachekit.logging_setup import configure_logging, bind_template_context

log = structlog.get_logger(__name__)

def _resolve_engine_config(template_path: Optional[Path], template_extension: Optional[str], strict_missing: bool) -> EngineConfig:
    # toml files first, then whatever was given on the command line.
    raw_config = load_and_merge_configs()
    return build_engine_config(
        raw_config,
        template_path=template_path,
        template_extension=template_extension,
        missing_as_empty=False if strict_missing else None,
    )

def _load_render_data(data_file: Optional[Path], user_vars: Tuple[str, ...]) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if data_file is not None:
        log.info("loading_render_data", path=str(data_file))
        try:
            text = data_file.read_text(encoding="utf-8")
            loaded = toml.loads(text) if data_file.suffix.lower() == ".toml" else json.loads(text)
        except (OSError, UnicodeDecodeError, ValueError, toml.TomlDecodeError) as e:
            raise ConfigError(f"could not load render data from {data_file}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"render data in {data_file} must be a mapping at the top level")
        data.update(loaded)
    for item in user_vars:
        if "=" not in item:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", param_hint="--var")
        key, value = item.split("=", 1)
        data[key.strip()] = value
    return data

def _handle_app_error(e: StacheKitError):
    log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
    click.secho(f"Error: {e}", fg="red", err=True)
    sys.exit(1)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@click.option("--force-json-logs", "force_json_logs", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="stachekit", prog_name="stachekit", help="Show version and exit.")
def main_cli_group(verbosity_level: int, force_json_logs: bool):
    """stachekit: compile and render mustache templates with file-system partials."""
    log_level = "warning"
    if verbosity_level == 1: log_level = "info"
    elif verbosity_level >= 2: log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=force_json_logs)


@main_cli_group.command("render")
@click.argument("name")
@optgroup.group("Template Resolution", help="Where templates and partials are found.")
@optgroup.option("-T", "--templates", "template_path", type=click.Path(file_okay=False, path_type=Path), default=None, help="Directory templates and partials are loaded from. Default: current directory.")
@optgroup.option("-x", "--ext", "template_extension", default=None, help=f"Template file extension, without the dot. Default: {DEFAULT_TEMPLATE_EXTENSION}.")
@optgroup.option("--strict-missing", "strict_missing", is_flag=True, default=False, help="Fail when a template or partial file does not exist instead of rendering it as empty.")
@optgroup.group("Render Data", help="Values the template is rendered against.")
@optgroup.option("-d", "--data", "data_file", type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path), default=None, help="JSON or TOML file holding the render data.")
@optgroup.option("--var", "user_vars", multiple=True, metavar="KEY=VALUE", help="Extra top-level string values; override the data file.")
@optgroup.option("--warn-missing-keys/--no-warn-missing-keys", "warn_missing_keys", default=None, help="Warn on stderr when a tag names a missing key.")
@optgroup.group("Output", help="Where the rendered text goes.")
@optgroup.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, writable=True, path_type=Path), default=None, help="Path to write the output to. Default: stdout.")
def render_command(name: str, template_path: Optional[Path], template_extension: Optional[str], strict_missing: bool,
                   data_file: Optional[Path], user_vars: Tuple[str, ...], warn_missing_keys: Optional[bool], output_file: Optional[Path]):
    """Compile template NAME and render it."""
    bind_template_context("render", name)
    try:
        config = _resolve_engine_config(template_path, template_extension, strict_missing)
        data = _load_render_data(data_file, user_vars)
        context = Context.from_config(config)
        template = context.compile_path(name)
        warn = config.warn_missing_keys if warn_missing_keys is None else warn_missing_keys
        rendered = template.render(data, warn=warn)
        log.info("template_rendered", name=name, length=len(rendered))
        destination = emit_rendered(rendered, output_file)
        if output_file:
            click.echo(f"Info: Output written to: {destination}", err=True)
    except StacheKitError as e:
        _handle_app_error(e)


@main_cli_group.command("partials")
@click.argument("names", nargs=-1, required=True)
@optgroup.group("Template Resolution", help="Where templates and partials are found.")
@optgroup.option("-T", "--templates", "template_path", type=click.Path(file_okay=False, path_type=Path), default=None, help="Directory templates and partials are loaded from. Default: current directory.")
@optgroup.option("-x", "--ext", "template_extension", default=None, help=f"Template file extension, without the dot. Default: {DEFAULT_TEMPLATE_EXTENSION}.")
@optgroup.option("--strict-missing", "strict_missing", is_flag=True, default=False, help="Fail when a template or partial file does not exist instead of rendering it as empty.")
def partials_command(names: Tuple[str, ...], template_path: Optional[Path], template_extension: Optional[str], strict_missing: bool):
    """List the partials each template in NAMES references."""
    try:
        config = _resolve_engine_config(template_path, template_extension, strict_missing)
        context = Context.from_config(config)
        for name in names:
            bind_template_context("partials", name)
            template = context.compile_path(name)
            log.debug("partials_listed", name=name, count=len(template.partials))
            for partial_name in template.partials:
                click.echo(partial_name if len(names) == 1 else f"{name}: {partial_name}")
    except StacheKitError as e:
        _handle_app_error(e)
