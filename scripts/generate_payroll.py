"""Generate payroll entries from attendance.

Without --period-id, every non-completed period ending today is processed;
meant to be run daily from cron.

Usage:
    python scripts/generate_payroll.py [--period-id N] [--policy skip_existing] [--abort-on-failure]
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.payroll_system.payroll_system.container import build_container
from src.payroll_system.payroll_system.payroll.commands import run_scheduled_generation


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate payroll entries for one period or for periods ending today.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--period-id", type=int, default=None, help="Payroll period to generate.")
    parser.add_argument(
        "--policy",
        choices=["skip_existing", "reject_existing", "overwrite_existing"],
        default=None,
        help="How to treat employees that already have an entry (default: settings).",
    )
    parser.add_argument(
        "--abort-on-failure",
        action="store_true",
        help="Write nothing for a period if any employee fails.",
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    container = build_container(db_config=dict(settings.DB_CONFIG))
    results = run_scheduled_generation(
        container.period_service,
        container.payroll_service,
        period_id=args.period_id,
        policy=args.policy or getattr(settings, "PAYROLL_DUPLICATE_POLICY", "skip_existing"),
        abort_on_failure=args.abort_on_failure,
    )
    for result in results:
        print(result.summary())
    return 1 if any(r.failed_count for r in results) else 0


if __name__ == "__main__":
    sys.exit(main())
