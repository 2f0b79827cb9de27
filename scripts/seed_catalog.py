"""
Fill the task catalog (tareas_catalogo) from the area checklist descriptors.
Run from the project root after the tables exist:

    python scripts/seed_catalog.py
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from planta.db import Base, SessionLocal, engine
from planta.services.catalog import seed_catalog_from_areas


def seed_catalog() -> int:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = seed_catalog_from_areas(db)
        print(f"Catalog seeded: {created} new entries.")
        return created
    except Exception as e:
        db.rollback()
        print(f"Error seeding catalog: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_catalog()
