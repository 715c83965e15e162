"""Command line interface for imagetool package."""
from __future__ import annotations

import argparse
import asyncio
import logging
import mimetypes
import os
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from rich.logging import RichHandler

from .cli_display import SessionDisplay, render_configuration_summary
from .errors import ValidationError
from .models import DEFAULT_BASE_URL, ClientConfig, Operation, ProcessedResult, RequestState
from .orchestrator import UploadOrchestrator
from .services.locators import LocatorRegistry
from .services.image_loader import load_image
from .utils.events import STATE_CHANGED


BASE_URL_ENV = "IMAGETOOL_BASE_URL"


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or --log-level is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _resolve_base_url(explicit: Optional[str]) -> str:
    value = (explicit or os.getenv(BASE_URL_ENV) or DEFAULT_BASE_URL).strip()
    if not value.startswith(("http://", "https://")):
        raise CLIError(f"base URL must start with http:// or https://: {value}")
    return value.rstrip("/")


def _build_config(
    base_url: str,
    binary_response: bool,
    timeout: Optional[float],
    notice_timeout: float,
) -> ClientConfig:
    binary_operations = frozenset({Operation.REMOVE_BACKGROUND}) if binary_response else frozenset()
    return ClientConfig(
        base_url=base_url,
        request_timeout=timeout,
        notice_timeout=notice_timeout,
        binary_operations=binary_operations,
    )


def _default_output_path(source: Path, operation: Operation, media_type: str) -> Path:
    suffix = mimetypes.guess_extension(media_type) or ".png"
    return source.with_name(f"{source.stem}-{operation.value}{suffix}")


def _save_result(
    result: ProcessedResult,
    locators: LocatorRegistry,
    source: Path,
    output: Optional[Path],
) -> Tuple[Path, int]:
    """Write an in-memory result to disk before the session releases it."""
    data, media_type = locators.resolve(result.locator)
    target = output or _default_output_path(source, result.operation, media_type)
    try:
        target.write_bytes(data)
    except OSError as exc:
        raise CLIError(f"could not write {target}: {exc}") from exc
    return target, len(data)


async def _run_process(
    source: Path,
    operation: Operation,
    config: ClientConfig,
    output: Optional[Path] = None,
) -> int:
    try:
        image = load_image(source)
    except ValidationError as exc:
        raise CLIError(str(exc)) from exc

    display = SessionDisplay(label=operation.label, source=source)
    try:
        async with UploadOrchestrator(config) as session:
            session.on(STATE_CHANGED, display.on_state_changed)
            await session.acquire_image(image)
            state = await session.submit(operation)
            result = session.result

            saved_to, size = None, None
            if state is RequestState.SUCCEEDED and result is not None:
                if result.owned:
                    saved_to, size = _save_result(result, session.locators, source, output)
                elif output is not None:
                    print(
                        f"WARNING: result is hosted at {result.locator}; --output only applies to binary responses",
                        file=sys.stderr,
                    )

            display.render_result(state, result, saved_to, size)
            return 0 if state is RequestState.SUCCEEDED else 1
    finally:
        display.close()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imagetool",
        description="Remove the background of an image or enhance its quality using a processing service.",
    )
    parser.add_argument("source", nargs="?", type=Path, help="Image file to process")
    parser.add_argument(
        "-o",
        "--operation",
        choices=[op.value for op in Operation],
        default=Operation.REMOVE_BACKGROUND.value,
        help="Operation to run (default: remove-background)",
    )
    parser.add_argument(
        "-u",
        "--base-url",
        default=None,
        help=f"Processing service URL (default from {BASE_URL_ENV} or {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--binary-response",
        action="store_true",
        help="Expect a raw image body from /remove-background instead of a JSON path",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write a binary result (default: <source stem>-<operation>.<ext> next to the source)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: wait indefinitely)",
    )
    parser.add_argument(
        "--notice-timeout",
        type=float,
        default=6.0,
        help="Seconds before an error notice expires",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="imagetool",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.source is None:
        parser.print_help()
        return 0

    source = Path(args.source).expanduser()
    if not source.is_file():
        print(f"ERROR: source is not a file: {source}", file=sys.stderr)
        return 1

    try:
        base_url = _resolve_base_url(args.base_url)
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    operation = Operation(args.operation)
    config = _build_config(base_url, args.binary_response, args.timeout, args.notice_timeout)

    render_configuration_summary(
        {
            "Source": str(source),
            "Operation": operation.label,
            "Endpoint": f"{base_url}{operation.endpoint}",
            "Response": config.shape_for(operation).value,
            "Timeout": f"{args.timeout:g}s" if args.timeout else "none",
            "Env File": str(used_env_file) if used_env_file else "-",
            "Logging": effective_log_mode,
        }
    )

    try:
        return asyncio.run(_run_process(source, operation, config, args.output))
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
