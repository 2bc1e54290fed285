from sqlalchemy import Column, DateTime, Integer, String

from jobportal.db.base import Base, utcnow


class User(Base):
    """Applicant profile, keyed by the identity provider's subject id."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, default="")
    last_name = Column(String, default="")
    role = Column(String, default="user")  # 'user' | 'admin'
    resume = Column(String, default="")

    created_at = Column(DateTime, default=utcnow)
    last_updated = Column(DateTime, default=utcnow)
