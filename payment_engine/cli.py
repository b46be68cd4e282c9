"""
Command-line entry point

    payment-engine transactions.csv > accounts.csv

Reads transaction records from a CSV file, applies them in order and writes
the final account report to stdout. Logs go to stderr.
"""

import argparse
import sys
from typing import List, Optional

from .accounts import LockPolicy
from .config import get_config
from .csv_reader import MalformedRecord, read_transactions
from .engine import PaymentEngine
from .logging_config import LOG_LEVELS, setup_logging
from .reporting import write_accounts

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_MALFORMED = 2


def build_parser() -> argparse.ArgumentParser:
    config = get_config()
    parser = argparse.ArgumentParser(
        prog="payment-engine",
        description="Apply a CSV stream of transactions and print final client balances",
    )
    parser.add_argument("input", help="CSV file with type, client, tx, amount columns")
    parser.add_argument("--skip-invalid", action="store_true",
                        default=config.skip_invalid_records,
                        help="Skip malformed rows instead of aborting")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=config.log_level,
                        help="Log level")
    parser.add_argument("--log-format", choices=["json", "text"], default=config.log_format)
    parser.add_argument("--lock-policy", choices=[p.value for p in LockPolicy],
                        default=config.lock_policy.value,
                        help="Operations still accepted by an account after a chargeback")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logging(level=args.log_level, fmt=args.log_format)

    engine = PaymentEngine(lock_policy=LockPolicy(args.lock_policy))

    try:
        with open(args.input, newline="") as f:
            engine.process(read_transactions(f, skip_invalid=args.skip_invalid))
    except OSError as e:
        logger.error(f"Cannot read {args.input}: {e}")
        return EXIT_INPUT_ERROR
    except MalformedRecord as e:
        logger.error(f"Malformed input in {args.input}: {e}")
        return EXIT_MALFORMED

    write_accounts(engine.accounts(), sys.stdout)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
