from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.payroll_system.payroll_system.database.bootstrap import PAYROLL_TABLES, apply_schema, missing_tables
from src.payroll_system.payroll_system.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    missing = missing_tables(db_config)
    if missing:
        raise SystemExit(f"Schema applied but tables are missing: {', '.join(missing)}")
    print(f"OK: {DBConfig.from_dict(db_config).describe()} has {', '.join(PAYROLL_TABLES)}")


if __name__ == "__main__":
    main()
