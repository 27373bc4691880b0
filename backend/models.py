from sqlalchemy import Column, String, Text, Integer, DateTime, Index, JSON
from backend.db import Base


class HackathonDB(Base):
    __tablename__ = "hackathons"

    id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, default="", nullable=True)
    organizer = Column(String, nullable=False)
    location = Column(String, nullable=False, default="Virtual")
    category = Column(String, nullable=False, default="Other")
    difficulty = Column(String, nullable=True)
    mode = Column(String, nullable=True)
    tags = Column(JSON, default=list, nullable=True)
    prize_amount = Column(Integer, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    registrations = Column(Integer, default=0, nullable=False)
    banner_url = Column(String, nullable=True)
    publish_status = Column(String, default="published", nullable=False)

    __table_args__ = (
        Index('idx_hackathons_start_date', 'start_date'),
    )

    def __repr__(self):
        return f"<Hackathon(title='{self.title}', start_date='{self.start_date}')>"
