#!/usr/bin/env python3
# backend/holdings_ledger/init_db.py
"""
Database initialization script.

Creates the ledger tables and, optionally, an active user to attach
bearer tokens to (users are provisioned outside this service):

    python -m holdings_ledger.init_db
    python -m holdings_ledger.init_db --email owner@example.com
"""

import argparse

from sqlalchemy import select

from holdings_ledger.database import SessionLocal, engine
from holdings_ledger.models import Base, User


def init_db(email: str | None = None) -> None:
    """Create all tables; add the user if given and not present yet."""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created successfully!")

    if not email:
        return

    with SessionLocal() as db:
        user = db.scalar(select(User).where(User.email == email))
        if user is None:
            user = User(email=email, is_active=True)
            db.add(user)
            db.commit()
            db.refresh(user)
            print(f"Created user {user.id} <{email}>")
        else:
            print(f"User {user.id} <{email}> already exists")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the holdings ledger tables.")
    parser.add_argument("--email", help="Also provision an active user with this email")
    init_db(parser.parse_args().email)
