"""CLI entrypoints for templatekit commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, TemplateKitConfig, default_config, load_config
from .errors import DocumentParseError
from .logging import configure_logging
from .session import EditingSession


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity (shows which resolver located each module).",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_file_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="Path to the HTML template.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="templatekit",
        description="Segment HTML email templates into modules and patch them one at a time.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .templatekit.yml or its directory (defaults to the template's directory).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    segment_parser = subparsers.add_parser(
        "segment",
        help="List the modules found in a template.",
    )
    _add_verbose_option(segment_parser, suppress_default=True)
    _add_file_argument(segment_parser)
    segment_parser.add_argument(
        "--json",
        action="store_true",
        help="Print modules and snippets as JSON.",
    )

    wrap_parser = subparsers.add_parser(
        "wrap",
        help="Print the template with selection markers around one module.",
    )
    _add_verbose_option(wrap_parser, suppress_default=True)
    _add_file_argument(wrap_parser)
    wrap_parser.add_argument("module_id", help="Module to mark.")

    patch_parser = subparsers.add_parser(
        "patch",
        help="Replace one module with the markup from a snippet file.",
    )
    _add_verbose_option(patch_parser, suppress_default=True)
    _add_file_argument(patch_parser)
    patch_parser.add_argument("module_id", help="Module to replace.")
    patch_parser.add_argument("snippet_file", help="File holding the replacement markup.")
    patch_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the patched template here instead of printing it.",
    )

    export_parser = subparsers.add_parser(
        "export",
        help="Wrap the template in a standalone HTML page for download.",
    )
    _add_verbose_option(export_parser, suppress_default=True)
    _add_file_argument(export_parser)
    export_parser.add_argument(
        "--title",
        default=None,
        help="Page title (defaults to the file name without extension).",
    )
    export_parser.add_argument(
        "--output-dir",
        default=".",
        help="Directory that receives the exported page.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service (requires uvicorn).",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for templatekit commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "serve":  # pragma: no cover - integration path
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    source = Path(args.file)
    try:
        config = _load_config(args.config, source)
        html = source.read_text(encoding="utf-8")
        session = EditingSession(html, config=config)
    except FileNotFoundError as exc:
        parser.exit(1, f"{exc}\n")
    except (ConfigError, DocumentParseError) as exc:
        parser.exit(1, f"templatekit {args.command} failed: {exc}\n")

    if args.command == "segment":
        _print_segments(session, as_json=bool(args.json))
    elif args.command == "wrap":
        if args.module_id not in session.mapped:
            parser.exit(1, f"Module {args.module_id} not found in {source}\n")
        session.begin_external_edit(args.module_id)
        sys.stdout.write(session.html)
    elif args.command == "patch":
        try:
            snippet = Path(args.snippet_file).read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        result = session.patch(args.module_id, snippet)
        if not result.applied:
            parser.exit(1, f"templatekit patch failed: {result.error}\nRun with --verbose for more details.\n")
        if args.output:
            Path(args.output).write_text(session.html, encoding="utf-8")
            print(f"Patched {args.module_id} via {result.strategy}; wrote {_relativize(Path(args.output))}")
        else:
            sys.stdout.write(session.html)
    elif args.command == "export":
        title = args.title or source.stem
        artifact = session.export_document(title)
        target = artifact.write(Path(args.output_dir))
        print(f"Exported template to {_relativize(target)}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load_config(config_arg: str | None, source: Path) -> TemplateKitConfig:
    if config_arg:
        return load_config(Path(config_arg))
    if source.parent.exists():
        return load_config(source.parent)
    return default_config()


def _print_segments(session: EditingSession, *, as_json: bool) -> None:
    snippets = session.snippets
    if as_json:
        payload = {
            "modules": [module.to_dict() for module in session.modules],
            "snippets": snippets,
            "mapped": session.mapped,
        }
        print(json.dumps(payload, indent=2))
        return
    for module in session.modules:
        status = "mapped" if module.id in snippets else "unmapped"
        print(f"{module.id}\t{module.type.value}\t{status}\t{module.name}")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
