"""
Job Portal demo data seeder.

Creates a demo recruiter and a handful of jobs through the Storage
interface, so it works the same against the database and the in-memory
store. Run directly with ``python -m jobportal.seed`` or set
``SEED_DEMO_DATA=true`` to seed on startup.
"""

import logging

from jobportal.core.config import settings
from jobportal.core.security import get_password_hash
from jobportal.db.base import utcnow
from jobportal.storage import Storage, select_storage

logger = logging.getLogger("jobportal.seed")

DEMO_COMPANY_EMAIL = "recruiter@jobportal.dev"
DEMO_COMPANY_PASSWORD = "recruiter123"

DEMO_JOBS = [
    {
        "title": "Backend Engineer",
        "description": "Build and run the APIs behind our hiring products.",
        "location": "Bangalore",
        "category": "Programming",
        "level": "Mid",
        "salary": 1800000,
    },
    {
        "title": "Data Scientist",
        "description": "Model candidate funnels and own our analytics stack.",
        "location": "Remote",
        "category": "Data Science",
        "level": "Senior",
        "salary": 2400000,
    },
    {
        "title": "Product Designer",
        "description": "Design the applicant and recruiter experience end to end.",
        "location": "Hyderabad",
        "category": "Designing",
        "level": "Entry",
        "salary": 900000,
    },
    {
        "title": "Security Analyst",
        "description": "Monitor, triage and harden our cloud infrastructure.",
        "location": "Pune",
        "category": "Cybersecurity",
        "level": "Lead",
        "salary": 2100000,
    },
]


def seed_demo_data(storage: Storage) -> bool:
    """
    Seed the demo recruiter and its jobs.

    Returns False without touching anything when the recruiter already
    exists.
    """
    if storage.get_company_by_email(DEMO_COMPANY_EMAIL) is not None:
        logger.info("Demo data already seeded. Skipping...")
        return False

    company = storage.create_company(
        name="Demo Labs",
        email=DEMO_COMPANY_EMAIL,
        hashed_password=get_password_hash(DEMO_COMPANY_PASSWORD),
    )

    for job in DEMO_JOBS:
        storage.create_job(**job, company_id=company.id, visible=True, date=utcnow())

    logger.info(
        "✅ Seeded %s (password: %s) with %d jobs",
        DEMO_COMPANY_EMAIL,
        DEMO_COMPANY_PASSWORD,
        len(DEMO_JOBS),
    )
    return True


if __name__ == "__main__":
    from jobportal.core.telemetry import configure_logging

    configure_logging(settings.DEBUG)
    seed_demo_data(select_storage(settings.DATABASE_URL))
