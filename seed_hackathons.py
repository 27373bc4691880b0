import json
import logging
import os
import sys
import time

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError, OperationalError

from backend.db import SessionLocal
from backend.crud import upsert_hackathon
from backend.init_db import create_all_tables
from backend.schemas import Hackathon

DEFAULT_SEED_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "seed_hackathons.json")


def load_seed_file(path):
    """Read a JSON list of hackathons, skipping entries that fail validation."""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    hackathons = []
    for entry in raw:
        try:
            hackathons.append(Hackathon.model_validate(entry))
        except ValidationError as e:
            entry_id = entry.get("id", "?") if isinstance(entry, dict) else "?"
            logging.warning(f"Skipping invalid hackathon entry {entry_id}: {e}")
    return hackathons


def store_hackathons(hackathons, source_name="seed"):
    """
    Upsert hackathons with a fresh session per attempt. Returns the newly added ones.
    Rows committed before a failed attempt still count as new after the retry.
    """
    max_retries = 3
    retry_delay = 1
    new_ids = set()

    for attempt in range(max_retries):
        db = SessionLocal()
        try:
            logging.info(f"Upserting {len(hackathons)} hackathons from {source_name}.")
            for h in hackathons:
                db_obj, is_new = upsert_hackathon(db, h)
                if is_new:
                    new_ids.add(h.id)

            logging.info(f"Completed upserting hackathons from {source_name}. {len(new_ids)} new hackathons added.")
            break

        except (SQLAlchemyError, OperationalError) as e:
            logging.error(f"Database error storing {source_name} (attempt {attempt + 1}/{max_retries}): {e}")
            if attempt < max_retries - 1:
                time.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logging.error(f"Failed to store {source_name} after {max_retries} attempts")
        except Exception as e:
            logging.error(f"Error storing {source_name}: {e}")
            break  # Don't retry for non-database errors
        finally:
            db.close()

    return [h for h in hackathons if h.id in new_ids]


def run(path=None):
    """
    Seed the database from a JSON file.
    Returns: List of Hackathon objects that were newly added to the database.
    """
    path = path or os.getenv("SEED_FILE") or DEFAULT_SEED_FILE
    logging.info(f"Seeding hackathons from {path}.")
    create_all_tables()
    return store_hackathons(load_seed_file(path), source_name=os.path.basename(path))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(message)s')
    run(sys.argv[1] if len(sys.argv) > 1 else None)
