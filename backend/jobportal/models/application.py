from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from jobportal.db.base import Base, utcnow


class JobApplication(Base):
    """
    One applicant's (or one anonymous name/email's) application to a job.

    Authenticated applications carry applicant_id and leave name/email empty;
    anonymous ones carry name/email. NULLs never collide in a unique
    constraint, so the two constraints below cover both kinds.
    """

    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_application_job_user"),
        UniqueConstraint("job_id", "email", name="uq_application_job_email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    applicant_id = Column("user_id", Integer, ForeignKey("users.id"), nullable=True, index=True)

    name = Column(String, nullable=True)
    email = Column(String, nullable=True, index=True)
    phone = Column(String, nullable=True)

    resume = Column(String, nullable=True)
    cover_letter = Column(Text, default="")

    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)

    status = Column(String, default="pending")  # pending | reviewed | accepted | rejected
    applied_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
