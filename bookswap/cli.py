"""Small operational utilities: create tables, seed demo data, run the server."""
import argparse
import logging

from bookswap.core.config import settings
from bookswap.core.database import Base, SessionLocal, engine
from bookswap.core.security import hash_password
from bookswap.models.models import Book, Category, User

logger = logging.getLogger("bookswap.cli")


def seed(db) -> None:
    # idempotent: only fills empty tables
    if db.query(User).count() == 0:
        db.add_all([
            User(name='Alice', department='CSE', register_number='REG001', year_of_study=3,
                 email='alice@example.com', password_hash=hash_password('alice123')),
            User(name='Bob', department='ECE', register_number='REG002', year_of_study=2,
                 email='bob@example.com', password_hash=hash_password('bob123')),
        ])
        db.flush()
    if db.query(Book).count() == 0:
        alice = db.query(User).filter(User.email == 'alice@example.com').first()
        if alice:
            db.add(Book(owner_id=alice.id, title='Designing Data-Intensive Applications',
                        author='Martin Kleppmann', category=Category.DBMS, rate=450))
    db.commit()


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description='BookSwap utilities')
    parser.add_argument('--initdb', action='store_true', help='Create tables')
    parser.add_argument('--seed', action='store_true', help='Seed sample data')
    parser.add_argument('--serve', action='store_true', help='Run the API server')
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    if args.initdb or args.seed:
        Base.metadata.create_all(bind=engine)
        logger.info('Database tables ready')
    if args.seed:
        db = SessionLocal()
        try:
            seed(db)
            logger.info('Seeded sample data')
        finally:
            db.close()
    if args.serve:
        import uvicorn
        uvicorn.run("bookswap.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == '__main__':
    main()
