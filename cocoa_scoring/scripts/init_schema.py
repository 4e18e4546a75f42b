"""
Create the scoring tables in the configured Snowflake schema.

Usage:
    python -m cocoa_scoring.scripts.init_schema
    python -m cocoa_scoring.scripts.init_schema --print    # print DDL only
"""

import argparse
import sys

import structlog

from cocoa_scoring.core.exceptions import RepositoryException
from cocoa_scoring.core.logging import configure_logging
from cocoa_scoring.repositories.schema import SCHEMA_DDL, SchemaManager

logger = structlog.get_logger(__name__)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Create Snowflake tables for the scoring engine")
    ap.add_argument("--print", dest="print_only", action="store_true", help="Print DDL without executing")
    args = ap.parse_args(argv)

    configure_logging(log_format="console")

    if args.print_only:
        for statement in SCHEMA_DDL:
            print(statement.strip() + ";\n")
        return 0

    try:
        SchemaManager().create_all()
    except RepositoryException as e:
        logger.error("schema_creation_failed", error=str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
