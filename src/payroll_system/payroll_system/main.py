from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, missing_tables
from .database.connection import DBConfig

from .container import build_container
from .attendance.controller import register as register_attendance
from .employees.controller import register as register_employees
from .payroll.controller import register as register_payroll

logger = logging.getLogger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Flask application factory.

    ``overrides`` replaces individual settings (tests pass
    ``{"STORAGE_BACKEND": "memory"}``).
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    def setting(name: str, default: Any = None) -> Any:
        if overrides and name in overrides:
            return overrides[name]
        return getattr(settings, name, default)

    logging.basicConfig(
        level=str(setting("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = setting("SECRET_KEY")
    app.config["DEBUG"] = bool(setting("DEBUG", False))
    app.config["TESTING"] = bool(setting("TESTING", False))
    db_config = setting("DB_CONFIG", {})
    storage_backend = str(setting("STORAGE_BACKEND", "mysql")).lower()

    if app.config["DEBUG"]:
        target = DBConfig.from_dict(db_config).describe() if storage_backend == "mysql" else "in-memory"
        logger.info("[payroll-system] settings=%s storage=%s", settings_module, target)

    if storage_backend == "mysql":
        if bool(setting("AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
            missing = missing_tables(db_config)
            if missing:
                logger.warning("[payroll-system] schema applied but tables are missing: %s", ", ".join(missing))
        if bool(setting("AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")
            logger.info("[payroll-system] demo seed ready")

    container = build_container(
        db_config=db_config,
        storage_backend=storage_backend,
        project_future_attendance=bool(setting("PROJECT_FUTURE_ATTENDANCE", True)),
        payroll_policy=setting("PAYROLL_POLICY"),
    )
    app.extensions["payroll_container"] = container

    register_employees(app, container)
    register_attendance(app, container)
    register_payroll(app, container)

    return app
