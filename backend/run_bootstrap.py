from __future__ import annotations

import argparse
import logging
import sys

from bootstrap import (
    BOOTSTRAP_MARKER_KEY,
    clear_bootstrap_marker,
    has_bootstrap_marker,
    promote_profile,
    run_bootstrap,
    set_bootstrap_marker,
)
from config import LOG_FORMAT, LOG_LEVEL
from models import ProfileRole

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create tables, seed defaults and manage staff roles.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Run bootstrap even if the one-time marker already exists.",
    )
    parser.add_argument(
        "--clear-marker",
        action="store_true",
        help=f"Clear marker key `{BOOTSTRAP_MARKER_KEY}` before running.",
    )
    parser.add_argument(
        "--promote",
        metavar="EMAIL",
        help="Change the role of the profile with this email and exit.",
    )
    parser.add_argument(
        "--role",
        choices=[role.value for role in ProfileRole],
        default=ProfileRole.ADMIN.value,
        help="Role used with --promote (default: admin).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    if args.promote:
        result = promote_profile(args.promote, ProfileRole(args.role))
        if not result.success:
            logger.error("Could not change role for %s: %s", args.promote, result.error)
            return 1
        logger.info("%s is now %s.", args.promote, args.role)
        return 0

    if args.clear_marker:
        removed = clear_bootstrap_marker()
        if removed:
            logger.info("Cleared bootstrap marker `%s`.", BOOTSTRAP_MARKER_KEY)
        else:
            logger.info("Marker `%s` was already absent.", BOOTSTRAP_MARKER_KEY)

    if has_bootstrap_marker() and not args.force:
        logger.info("Bootstrap marker `%s` already exists. Nothing to do. Use --force to rerun.", BOOTSTRAP_MARKER_KEY)
        return 0

    logger.info("Running backend bootstrap...")
    run_bootstrap()
    set_bootstrap_marker()
    logger.info("Bootstrap completed and marker `%s` updated.", BOOTSTRAP_MARKER_KEY)
    return 0


if __name__ == "__main__":
    sys.exit(main())
