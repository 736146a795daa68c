"""CLI entrypoint for running an operation described by a YAML run file."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path

from opie.common.config_loader import load_operation, load_run_config
from opie.common.constants import COMMANDS, EXIT_FAILURE, EXIT_HARD_FAIL, EXIT_SUCCESS, LOG_LEVELS
from opie.common.errors import ConfigError, OpieError
from opie.common.fs import write_json
from opie.common.ids import generate_run_id
from opie.common.logging import build_logger, log_event


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="opie", description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("run_file")
    parser.add_argument("--overlay", default=None)
    parser.add_argument("--input-json", default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--summary-path", default=None)
    parser.add_argument("--log-path", default=None)
    parser.add_argument("--log-level", default=None, choices=list(LOG_LEVELS))
    return parser.parse_args(argv)


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    overlay_path = Path(args.overlay) if args.overlay else None

    config = load_run_config(Path(args.run_file), overlay_path)
    if args.input_json is not None:
        try:
            config = replace(config, input=json.loads(args.input_json))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"--input-json is not valid JSON: {exc}") from exc

    level = args.log_level or config.logging["level"]
    logger = build_logger(run_id, log_path=Path(args.log_path) if args.log_path else None, level=level)

    operation_cls = load_operation(config.operation)
    log_event(logger, "run start", run_id=run_id, operation=operation_cls.__name__, event="RUN_START", status="ok")

    result = operation_cls.call(config.input, config.context)
    summary = {"run_id": run_id, **result.to_dict()}
    if args.summary_path:
        write_json(Path(args.summary_path), summary)

    if result.is_failure:
        log_event(
            logger,
            "run finished with failure",
            run_id=run_id,
            operation=operation_cls.__name__,
            event="RUN_END",
            status="failure",
            error_code=str(result.failure.type),
        )
        return EXIT_FAILURE

    log_event(logger, "run end", run_id=run_id, operation=operation_cls.__name__, event="RUN_END", status="ok")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except OpieError as exc:
        print(f"opie: {exc.error_code}: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
