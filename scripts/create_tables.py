#!/usr/bin/env python3
"""Create every table of the level-up schema on the configured database."""
from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from levelup.core.logger import get_logger, init_logging  # noqa: E402  (import after sys.path manipulation)
from levelup.db.engine import create_sync_engine  # noqa: E402
from levelup.models import Base  # noqa: E402

LOGGER = get_logger(__name__)


def main() -> None:
    engine = create_sync_engine()
    Base.metadata.create_all(engine)
    LOGGER.info("Created %s tables", len(Base.metadata.tables))


if __name__ == "__main__":
    init_logging(app_name="create-tables")
    main()
