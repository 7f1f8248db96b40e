"""CLI entrypoints for asyncapigen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import apply_env_overrides, load_config
from .errors import EmitterError, ErrorCategory
from .logging import configure_logging
from .orchestrator import Orchestrator
from .plugins import create_default_registry
from .validators import render_report


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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asyncapigen",
        description="Generate AsyncAPI 3.0 documents from annotated API descriptions.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    emit_parser = subparsers.add_parser(
        "emit",
        help="Emit an AsyncAPI document for an API description.",
    )
    _add_verbose_option(emit_parser, suppress_default=True)
    emit_parser.add_argument("description", help="Path to the API description (YAML or JSON).")
    emit_parser.add_argument(
        "-o",
        "--output",
        help="Output file or directory (defaults to the configured output dir).",
    )
    emit_parser.add_argument(
        "--file-type",
        choices=("yaml", "json"),
        help="Serialization format of the emitted document.",
    )
    emit_parser.add_argument(
        "--config",
        help="Path to an .asyncapigen.yml file (defaults to the description's directory).",
    )
    emit_parser.add_argument(
        "--fail-on-invalid",
        action="store_true",
        default=None,
        help="Exit with an error instead of writing a document that fails validation.",
    )
    emit_parser.add_argument(
        "--skip-validation",
        action="store_true",
        help="Skip document validation for this run.",
    )

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate an existing AsyncAPI document.",
    )
    _add_verbose_option(validate_parser, suppress_default=True)
    validate_parser.add_argument("document", help="Path to the AsyncAPI document (YAML or JSON).")

    plugins_parser = subparsers.add_parser(
        "plugins",
        help="List the built-in protocol plugins and their capabilities.",
    )
    _add_verbose_option(plugins_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for asyncapigen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "emit":
        _run_emit(parser, args)
    elif args.command == "validate":
        _run_validate(parser, args)
    elif args.command == "plugins":
        for entry in create_default_registry().describe():
            aliases = ", ".join(entry["aliases"]) or "-"
            capabilities = ", ".join(entry["capabilities"])
            print(f"{entry['name']} (binding {entry['bindingVersion']}; aliases: {aliases}): {capabilities}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_emit(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    description = Path(args.description).expanduser()
    try:
        config_source = Path(args.config).expanduser() if args.config else description.resolve().parent
        config = apply_env_overrides(load_config(config_source))
        outcome = Orchestrator().run_emit(
            description,
            config=config,
            output=args.output,
            file_type=args.file_type,
            fail_on_invalid=args.fail_on_invalid,
            skip_validation=bool(args.skip_validation),
        )
    except EmitterError as exc:
        if exc.category is ErrorCategory.VALIDATION:
            parser.exit(1, f"asyncapigen emit failed: {exc.message}\n")
        parser.exit(1, f"asyncapigen emit failed: {exc}\nRun with --verbose for more details.\n")

    if outcome.validation is not None:
        print(render_report(outcome.validation))
    for warning in outcome.warnings:
        print(f"warning: {warning}")
    print(f"AsyncAPI document written to {_relativize(outcome.output_path)}")


def _run_validate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    try:
        result = Orchestrator().validate_file(args.document)
    except EmitterError as exc:
        parser.exit(1, f"asyncapigen validate failed: {exc}\n")
    print(render_report(result))
    if not result.valid:
        parser.exit(1)


def _relativize(path: Path | None) -> str:
    if path is None:
        return "-"
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
