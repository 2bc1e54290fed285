from sqlalchemy import Column, DateTime, Integer, String

from jobportal.db.base import Base, utcnow


class Company(Base):
    """Recruiter account that owns job postings."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    image = Column(String, nullable=True)  # logo reference: remote URL or /uploads/<file>

    # Password reset (cleared after a successful reset)
    reset_password_token = Column(String, nullable=True)
    reset_password_expires = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
