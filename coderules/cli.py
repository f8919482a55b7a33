"""CLI entrypoints for coderules commands."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .config import ConfigError
from .logging import configure_logging
from .pipeline import load_pipeline


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .coderules.yml or its directory (defaults to the current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coderules",
        description="Extract task-relevant coding rules from a documentation tree.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the MCP server on stdin/stdout.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_config_option(serve_parser)

    http_parser = subparsers.add_parser(
        "http",
        help="Run the HTTP service.",
    )
    _add_verbose_option(http_parser, suppress_default=True)
    _add_config_option(http_parser)
    http_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    http_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    query_parser = subparsers.add_parser(
        "query",
        help="Print the relevant documentation for a single task.",
    )
    _add_verbose_option(query_parser, suppress_default=True)
    _add_config_option(query_parser)
    query_parser.add_argument("task", help="Description of the task you're working on.")
    query_parser.add_argument(
        "--docs",
        default=".",
        help="Path to the documentation directory (defaults to current directory).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for coderules commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        pipeline = load_pipeline(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":
        from .server import StdioMCPServer

        asyncio.run(StdioMCPServer(pipeline).run())
    elif args.command == "http":
        import uvicorn

        from .service.app import create_app

        uvicorn.run(create_app(lambda: pipeline), host=args.host, port=args.port)
    elif args.command == "query":
        response = asyncio.run(
            pipeline.process_request({"task": args.task, "docsPath": args.docs})
        )
        text = "\n".join(item["text"] for item in response["content"])
        if response.get("isError"):
            parser.exit(1, f"{text}\n")
        print(text)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
