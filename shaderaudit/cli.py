"""CLI entrypoints for shaderaudit commands."""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path
from typing import Any, Optional, Tuple

from .auditor import AuditRun, Auditor
from .config import AuditConfig, ConfigError, load_config
from .logging import configure_logging, get_logger
from .models import AuditError
from .registry import load_registry
from .report import FORMATS, render


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
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


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project root containing .shaderaudit.yml (defaults to current directory).",
    )
    parser.add_argument("--config", help="Explicit path to a .shaderaudit.yml file.")
    parser.add_argument("--shader-dir", help="Directory holding shader sources.")
    parser.add_argument("--source-root", help="Root of the implementation source tree.")
    parser.add_argument(
        "--registry",
        help="Pattern registry as module:attribute or a shaderaudit.registries entry point name. "
        "Without it, patterns are discovered from the source trees.",
    )
    parser.add_argument(
        "--context",
        help="Host context as module:attribute (object or zero-argument factory) "
        "passed to pattern constructors.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default=None,
        help="Output format (defaults to the configured format, else tsv).",
    )
    parser.add_argument("-o", "--output", help="Write the report to this file instead of stdout.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shaderaudit",
        description="Find shader pattern controls that are exposed but never used.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    audit_parser = subparsers.add_parser(
        "audit",
        help="Report, per pattern and control, whether the control is used.",
    )
    _add_verbose_option(audit_parser, suppress_default=True)
    _add_source_options(audit_parser)
    audit_parser.add_argument(
        "--only-unused",
        action="store_true",
        default=None,
        help="Only list patterns with at least one dangling control.",
    )
    audit_parser.add_argument(
        "--fail-on-unused",
        action="store_true",
        help="Exit with status 1 when any dangling control is found.",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="List shader patterns, their shader files and shader file usage.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_source_options(list_parser)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP audit service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for shaderaudit commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "serve":
        from .service import run_service

        try:
            run_service(host=args.host, port=args.port)
        except RuntimeError as exc:
            parser.exit(2, f"shaderaudit: error: {exc}\n")
        return

    try:
        config = _load_effective_config(args)
        output, dangling = _execute(args, config)
    except (AuditError, ConfigError) as exc:
        parser.exit(2, f"shaderaudit: error: {exc}\n")

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Report written to {args.output}")
    else:
        sys.stdout.write(output)

    if args.command == "audit" and args.fail_on_unused and dangling:
        parser.exit(1)


def _execute(args: argparse.Namespace, config: AuditConfig) -> Tuple[str, int]:
    logger = get_logger("cli")
    context, dispose = _load_context(args.context)
    try:
        registry = load_registry(args.registry) if args.registry else None
        auditor = Auditor(config, context=context)
        is_audit = args.command == "audit"
        run: AuditRun = auditor.run(registry, resolve=is_audit)
    finally:
        if dispose is not None:
            try:
                dispose()
            except Exception as exc:
                logger.warning("Disposing host context failed: %s", exc)

    fmt = args.format or config.report.format
    only_unused = False
    if is_audit:
        only_unused = config.report.only_unused if args.only_unused is None else args.only_unused
    output = render(run, fmt, only_unused=only_unused, verdicts=is_audit)
    dangling = sum(len(entry.unused_tags) for entry in run.entries)
    return output, dangling


def _load_effective_config(args: argparse.Namespace) -> AuditConfig:
    config = load_config(Path(args.config) if args.config else Path(args.path))
    cwd = Path.cwd()
    if args.shader_dir:
        config.shader_dir = (cwd / args.shader_dir).resolve()
    if args.source_root:
        config.source_root = (cwd / args.source_root).resolve()
    if config.report.format not in FORMATS:
        raise ConfigError(f"Unknown report format '{config.report.format}'")
    return config


def _load_context(spec: Optional[str]) -> Tuple[Any, Any]:
    """Return the host context and, when this call created it, its dispose hook."""
    if not spec:
        return None, None
    module_name, _, attribute = spec.partition(":")
    if not attribute:
        raise AuditError(f"Context must be given as module:attribute, got '{spec}'")
    try:
        module = importlib.import_module(module_name)
        target = getattr(module, attribute)
    except (ImportError, AttributeError) as exc:
        raise AuditError(f"Cannot load host context '{spec}': {exc}") from exc
    if callable(target):
        context = target()
        dispose = getattr(context, "dispose", None)
        return context, dispose if callable(dispose) else None
    return target, None


if __name__ == "__main__":
    main(sys.argv[1:])
