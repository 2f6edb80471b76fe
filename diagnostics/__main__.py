"""CLI entry: python -m diagnostics"""

import logging
import sys

from diagnostics.self_checks import format_report, run_self_checks, summarize_checks


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    results = run_self_checks()
    print(format_report(results))
    return 1 if summarize_checks(results)["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
