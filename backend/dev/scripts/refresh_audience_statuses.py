#!/usr/bin/env python3
"""
Recalcule le statut de toutes les audiences (à planifier chaque nuit, par cron par exemple)
"""
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from sqlalchemy.exc import SQLAlchemyError

from database import SessionLocal
from services.audience_service import audience_service


if __name__ == "__main__":
    db = SessionLocal()
    try:
        resultat = audience_service.rafraichir_statuts(db)
        print(f"{resultat['misesAJour']} audience(s) mise(s) a jour sur {resultat['total']}")
    except SQLAlchemyError as e:
        print(f"Erreur lors du rafraichissement des statuts: {e}")
        sys.exit(1)
    finally:
        db.close()
