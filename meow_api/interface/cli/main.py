"""CLI entry point: serve the Meow API with uvicorn."""

import argparse
import logging
from dataclasses import replace

from meow_api.config.settings import LOG_LEVELS, AppSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="meow-api", description="Serve the cat pic store.")
    parser.add_argument("--host", help="Bind address (default: $HOST or 127.0.0.1)")
    parser.add_argument("--port", type=int, help="Bind port (default: $PORT or 3000)")
    parser.add_argument("--upload-dir", help="Blob directory (default: $UPLOAD_DIR or uploads)")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Log level (default: $LOG_LEVEL or info)",
    )
    return parser


def settings_from_args(args: argparse.Namespace, base: AppSettings | None = None) -> AppSettings:
    """Overlay CLI flags on environment-driven settings."""
    settings = base or AppSettings()
    overrides = {
        "host": args.host,
        "port": args.port,
        "upload_dir": args.upload_dir,
        "log_level": args.log_level,
    }
    return replace(settings, **{k: v for k, v in overrides.items() if v is not None})


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)

    from meow_api.log_config import configure_logging, get_logger

    configure_logging(
        pretty=not settings.log_json,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )
    log = get_logger(__name__)

    import uvicorn

    from meow_api.config.compose import build_container
    from meow_api.interface.http.api import create_app

    app = create_app(build_container(settings))
    log.info(
        f"Server listening on port {settings.port}. "
        f"View documentation at http://{settings.host}:{settings.port}/api-docs"
    )
    # uvicorn handles SIGTERM/SIGINT with a graceful shutdown
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)


if __name__ == "__main__":
    main()
