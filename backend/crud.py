from datetime import datetime, timezone

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from backend.models import HackathonDB
from backend.schemas import Hackathon, HackathonRecord, ensure_utc
import logging


def compute_status(start_date: datetime, end_date: datetime, now: datetime = None) -> str:
    """
    Derive the public status from the event window:
    upcoming before it starts, past once it has ended, live in between.
    """
    now = ensure_utc(now or datetime.now(timezone.utc))
    if now < ensure_utc(start_date):
        return "upcoming"
    if now > ensure_utc(end_date):
        return "past"
    return "live"


def to_record(db_obj: HackathonDB, now: datetime = None) -> HackathonRecord:
    return HackathonRecord(
        id=db_obj.id,
        title=db_obj.title,
        description=db_obj.description,
        organizer=db_obj.organizer,
        location=db_obj.location,
        category=db_obj.category,
        difficulty=db_obj.difficulty,
        mode=db_obj.mode,
        tags=db_obj.tags or [],
        prize_amount=db_obj.prize_amount,
        start_date=db_obj.start_date,
        end_date=db_obj.end_date,
        registrations=db_obj.registrations,
        banner_url=db_obj.banner_url,
        status=compute_status(db_obj.start_date, db_obj.end_date, now),
    )


def upsert_hackathon(db: Session, hack: Hackathon):
    """
    Upsert a hackathon and return (hackathon_obj, is_new)
    where is_new is True if the hackathon was newly created, False if updated
    """
    fields = dict(
        title=hack.title,
        description=hack.description,
        organizer=hack.organizer,
        location=hack.location,
        category=hack.category,
        difficulty=hack.difficulty,
        mode=hack.mode,
        tags=list(hack.tags),
        prize_amount=hack.prize_amount,
        start_date=hack.start_date,
        end_date=hack.end_date,
        registrations=hack.registrations or 0,
        banner_url=hack.banner_url,
        publish_status=hack.publish_status,
    )
    try:
        db_obj = db.query(HackathonDB).filter_by(id=hack.id).first()
        if db_obj:
            for name, value in fields.items():
                setattr(db_obj, name, value)
            db.commit()
            return db_obj, False

        db_obj = HackathonDB(id=hack.id, **fields)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj, True
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error in upsert_hackathon: {e}")
        raise


def get_hackathon(db: Session, hackathon_id: str, now: datetime = None):
    try:
        db_obj = db.query(HackathonDB).filter_by(id=hackathon_id).first()
    except SQLAlchemyError as e:
        logging.error(f"Database error in get_hackathon: {e}")
        raise
    return to_record(db_obj, now) if db_obj else None


def get_public_hackathons(db: Session, now: datetime = None):
    """
    All published hackathons as discovery records, soonest start first.
    Drafts are never listed. A database failure yields an empty listing.
    """
    try:
        rows = db.query(HackathonDB)\
            .filter(HackathonDB.publish_status != "draft")\
            .order_by(HackathonDB.start_date.asc())\
            .all()
    except SQLAlchemyError as e:
        logging.error(f"Database error in get_public_hackathons: {e}")
        return []
    return [to_record(row, now) for row in rows]
