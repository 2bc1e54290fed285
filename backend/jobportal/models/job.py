from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text

from jobportal.db.base import Base, utcnow


class Job(Base):
    """Job posting. Hidden jobs stay addressable by id."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)  # rich text (HTML)
    location = Column(String, nullable=False)
    category = Column(String, nullable=False)
    level = Column(String, nullable=False)
    salary = Column(Float, nullable=False)
    visible = Column(Boolean, default=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)

    date = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
