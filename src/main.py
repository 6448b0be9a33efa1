import csv
import sys
import logging
from typing import List, Optional

from pydantic import ValidationError

from config import Settings
from csv_io import RecordParseError, write_accounts
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    try:
        settings = Settings()
    except ValidationError as e:
        logging.basicConfig(format="%(levelname)s: %(message)s", stream=sys.stderr)
        logger.error(f"Invalid configuration: {e}")
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(argv) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[0]
    engine = PaymentsEngine(shard_count=settings.shard_count, on_malformed=settings.malformed_records)

    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1
    except (csv.Error, UnicodeDecodeError) as e:
        logger.error(f"Cannot parse {filepath}: {e}")
        return 1
    except RecordParseError as e:
        logger.error(f"Aborting on malformed record: {e}")
        return 1

    try:
        write_accounts(accounts.values(), sys.stdout)
        sys.stdout.flush()
    except OSError as e:
        logger.error(f"Cannot write output: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
