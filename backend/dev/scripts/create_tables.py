#!/usr/bin/env python3
"""
Script pour créer/mettre à jour toutes les tables de la base de données
"""
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from database import engine, get_db_url
import models


def create_all_tables():
    """Crée toutes les tables définies dans models.py"""
    print(f"Creation des tables sur {get_db_url().split('@')[-1]}...")

    models.Base.metadata.create_all(bind=engine)
    print("Tables creees avec succes!")

    tables = inspect(engine).get_table_names()
    print(f"\nTables disponibles ({len(tables)}):")
    for table in sorted(tables):
        print(f"  - {table}")


if __name__ == "__main__":
    try:
        create_all_tables()
    except SQLAlchemyError as e:
        print(f"Erreur lors de la creation des tables: {e}")
        sys.exit(1)
