import argparse
import logging

from sqlalchemy.orm import sessionmaker

from clubdraw.db.engine import make_engine
from clubdraw.defaults import demo_roster
from clubdraw.models import Base
from clubdraw.workflows import load_default_prizes, replace_roster


def main() -> None:
    """Reset the development database and load the demo roster and prizes."""
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument(
        "--members-per-club",
        type=int,
        default=20,
        help="number of placeholder members generated for every club",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    engine = make_engine()

    # Winners reference prizes, so drop with foreign keys off to keep SQLite
    # from refusing the reset.
    with engine.begin() as conn:
        if conn.dialect.name == "sqlite":
            conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        Base.metadata.drop_all(bind=conn)
        if conn.dialect.name == "sqlite":
            conn.exec_driver_sql("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)

    with Session.begin() as session:
        roster = demo_roster(args.members_per_club)
        replace_roster(session, roster, clear_winners=True)
        prize_count = load_default_prizes(session)

    print(f"Seeded {len(roster)} participants in {len(roster.clubs())} clubs and {prize_count} prizes.")


if __name__ == "__main__":
    main()
