"""Load sample employees, attendance and one payroll period.

The schema must exist already (see init_db.py).
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

from src.payroll_system.payroll_system.database.bootstrap import apply_seed_sql
from src.payroll_system.payroll_system.database.connection import DBConfig

logger = logging.getLogger("seed_db")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("seed_file", nargs="?", type=Path, default=REPO_ROOT / "database" / "seed.sql")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(message)s")

    if not args.seed_file.is_file():
        raise SystemExit(f"Seed file not found: {args.seed_file}")

    db_config = dict(settings.DB_CONFIG)
    apply_seed_sql(db_config, seed_path=args.seed_file)
    logger.info("Loaded %s into %s", args.seed_file.name, DBConfig.from_dict(db_config).describe())


if __name__ == "__main__":
    main()
