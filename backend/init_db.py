import logging

from backend.db import Base, engine
import backend.models  # registers HackathonDB on Base.metadata


def create_all_tables(bind=None):
    Base.metadata.create_all(bind=bind or engine)
    logging.info(f"Ensured tables exist: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(message)s')
    create_all_tables()
