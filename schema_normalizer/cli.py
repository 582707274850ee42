from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from schema_normalizer import __version__ as TOOL_VERSION
from schema_normalizer.config import default_visit_config, load_config, with_overrides
from schema_normalizer.errors import ConfigurationError, NormalizerIOError
from schema_normalizer.files import normalize_file
from schema_normalizer.logging_utils import configure_logging
from schema_normalizer.report import emit_report

EXIT_SUCCESS = 0
EXIT_CONFIGURATION_ERROR = 1
EXIT_IO_ERROR = 2

logger = logging.getLogger("schema_normalizer.cli")


class CliError(Exception):
    def __init__(self, message: str, code: int = EXIT_CONFIGURATION_ERROR) -> None:
        super().__init__(message)
        self.code = code


class NormalizerArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise CliError(message, EXIT_CONFIGURATION_ERROR)


def eprint(message: str) -> None:
    print(message, file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = NormalizerArgumentParser(
        prog="schema-normalizer",
        description="Repair a drifted CSV export so every row matches a fixed schema.",
    )
    parser.add_argument("input", help="Input CSV path")
    parser.add_argument("output", help="Output CSV path (written only if the pass succeeds)")
    parser.add_argument("--config", help="YAML or JSON configuration; defaults to the visit export repairs")
    parser.add_argument("--schema-width", dest="schema_width", type=int, help="Override the schema width")
    parser.add_argument("--no-bom", dest="no_bom", action="store_true", help="Write UTF-8 without a byte-order mark")
    parser.add_argument("--partitions", type=int, help="Process rows in N parallel partitions")
    parser.add_argument("--report-json", dest="report_json", help="Also write the pass report as JSON")
    parser.add_argument("--log-level", dest="log_level", default="INFO", help="Logging level (default INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {TOOL_VERSION}")
    return parser


def run_normalize(args: argparse.Namespace) -> int:
    config = load_config(Path(args.config)) if args.config else default_visit_config()
    config = with_overrides(
        config,
        schema_width=args.schema_width,
        partitions=args.partitions,
        emit_bom=False if args.no_bom else None,
    )

    report_path = Path(args.report_json) if args.report_json else None
    result = normalize_file(Path(args.input), Path(args.output), config, report_path=report_path)
    emit_report(result.report, logger)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        configure_logging(args.log_level)
        return run_normalize(args)
    except CliError as exc:
        eprint(str(exc))
        return exc.code
    except ConfigurationError as exc:
        eprint(f"configuration error: {exc}")
        return EXIT_CONFIGURATION_ERROR
    except NormalizerIOError as exc:
        cause = exc.__cause__
        eprint(f"i/o error: {exc}" + (f" (caused by {cause!r})" if cause else ""))
        return EXIT_IO_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
