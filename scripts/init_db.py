"""Create the media-gc tables in the configured database."""

from __future__ import annotations

import sys

from sqlalchemy import inspect

from src.media_gc.config import load_config


def main() -> int:
    config = load_config()
    tables = sorted(inspect(config.engine).get_table_names())
    print(f"Database ready at {config.settings.database_url}: {', '.join(tables)}")
    config.engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
