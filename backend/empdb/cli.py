import argparse
import logging
import sys
from typing import List, Optional

from empdb.core.errors import EmployeeDbError, HeaderValidationError
from empdb.io_counters import show_report, timed
from empdb.storage.database_file import DatabaseFile
from empdb.utils.logger import LOGGER_NAME, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="empdb", description="Fixed-record employee database file")
    p.add_argument("-f", "--file", dest="filepath", help="(required) path to database file")
    p.add_argument("-n", "--new", action="store_true", help="create new database file")
    p.add_argument("-a", "--add", metavar="NAME,ADDRESS,HOURS", help="add an employee")
    p.add_argument("-l", "--list", action="store_true", help="list employees")
    p.add_argument("--atomic", action="store_true", help="persist via temporary file and rename")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging and I/O report")
    return p


def list_employees(db: DatabaseFile) -> None:
    for i, rec in enumerate(db.store.list_all()):
        print(f"Employee {i}")
        print(f"\tName: {rec.name_text}")
        print(f"\tAddress: {rec.address_text}")
        print(f"\tHours: {rec.hours}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG)

    if not args.filepath:
        print("Filepath is required argument")
        parser.print_usage()
        return 0

    try:
        with timed(), DatabaseFile.open(args.filepath, create_new=args.new) as db:
            if args.add is not None:
                rec = db.add_employee(args.add)
                logger.info("Added employee %s", rec.name_text)
            db.persist(atomic=args.atomic)
            if args.list:
                list_employees(db)
    except HeaderValidationError as e:
        print(f"Failed to validate database header ({e.check} check): {e}", file=sys.stderr)
        return 1
    except EmployeeDbError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        logger.debug("Command failed", exc_info=True)
        return 1
    finally:
        if args.verbose:
            show_report()
    return 0


def run() -> None:
    setup_logging()
    sys.exit(main())


if __name__ == "__main__":
    run()
