import argparse
import sys
from typing import List, Optional

from config import LOG_FORMATS, LOG_LEVELS, EngineConfig
from csv_io import write_summary
from errors import PaymentsError
from logging_config import setup_logging
from payments_engine import PaymentsEngine


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-ledger",
        description="Replays a CSV transaction log and prints the resulting client accounts as CSV.",
    )
    parser.add_argument("input_filepath", help="CSV file with type,client,tx,amount records")
    parser.add_argument("--workers", type=int, help="number of client shards processed in parallel")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="log level")
    parser.add_argument("--log-file", help="write logs to this file instead of stderr")
    parser.add_argument("--log-format", choices=LOG_FORMATS, help="log record format")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = EngineConfig.from_env()
        if args.workers is not None:
            config.num_workers = args.workers
        if args.log_level is not None:
            config.log_level = args.log_level
        if args.log_file is not None:
            config.log_file = args.log_file
        if args.log_format is not None:
            config.log_format = args.log_format
        config.validate()

        setup_logging(config.log_level, config.log_file, config.log_format)

        engine = PaymentsEngine(num_workers=config.num_workers)
        snapshots = engine.process_file(args.input_filepath)
    except PaymentsError as e:
        print(f"Failed to process input: {e}", file=sys.stderr)
        return 1

    output = write_summary(snapshots)
    print(output, end="" if output.endswith("\n") else "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
