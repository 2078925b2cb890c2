# 실행: python -m km_api.db.init_db [--seed]
import logging
import sys
from sqlalchemy.orm import Session
from km_api.config.database import SessionLocal, Base, engine
from km_api.db.company_db import SqlCompanyRepository
from km_api.models import company_model, user_model  # noqa: F401
from km_api.schemas.company_schema import CompanyEntity

logger = logging.getLogger(__name__)

SAMPLE_COMPANIES = [
    ("Sample Corp", "info@sample.example.com", "https://sample.example.com"),
    ("Acme Inc", "contact@acme.example.com", "https://acme.example.com"),
    ("Globex", "hello@globex.example.com", None),
]


def init_tables():
    Base.metadata.create_all(bind=engine)


def seed_companies(db: Session) -> int:
    repo = SqlCompanyRepository(db)
    created = 0
    for name, email, website in SAMPLE_COMPANIES:
        if repo.exists_by_email(email):
            continue
        repo.create(CompanyEntity(name=name, email=email, website=website))
        created += 1
    return created


def init_db(seed: bool = False):
    init_tables()
    if not seed:
        return

    db: Session = SessionLocal()
    try:
        created = seed_companies(db)
        logger.info("seeded %d companies", created)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db(seed="--seed" in sys.argv)
