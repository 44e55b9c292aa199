"""Create the RaffleDesk tables in the configured database.

Reads DATABASE_URL (or PG* variables) from .env / environment. With
``--entity NAME DISPLAY_NAME`` it also registers a first club.

Usage:
  python scripts/create_tables.py
  python scripts/create_tables.py --entity ravens "Ravens Club"
"""

from __future__ import annotations

import argparse
import pathlib
import sys

from dotenv import load_dotenv
from sqlalchemy import text

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from raffledesk import models  # noqa: F401,E402
from raffledesk.access import AccessPolicy  # noqa: E402
from raffledesk.config import resolve_database_url  # noqa: E402
from raffledesk.db import create_app_engine, create_session_factory, session_scope  # noqa: E402
from raffledesk.models.base import Base  # noqa: E402
from raffledesk.services.entity_service import EntityService  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--entity", nargs=2, metavar=("NAME", "DISPLAY_NAME"))
    args = parser.parse_args(argv)

    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    engine = create_app_engine(resolve_database_url())
    Base.metadata.create_all(bind=engine)

    # create_all() leaves existing tables alone, so add the partial index by hand.
    if engine.dialect.name == "postgresql":
        with engine.begin() as conn:
            conn.execute(
                text(
                    "CREATE UNIQUE INDEX IF NOT EXISTS uq_sessions_active_entity "
                    "ON sessions (entity_id) WHERE status = 'active'"
                )
            )

    if args.entity:
        name, display_name = args.entity
        with session_scope(create_session_factory(engine)) as session:
            entity = EntityService().create_entity(
                session,
                AccessPolicy.system(),
                name=name,
                display_name=display_name,
            )
            print(f"Entity created: {entity.id} ({entity.name})")

    print("Tables created (or already exist).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
