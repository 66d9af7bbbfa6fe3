#!/usr/bin/env python3
"""
Crée une audience de test dans 7 jours avec rappel d'enrôlement
Usage: python dev/scripts/create_test_audience_with_enrollment.py
"""
import os
import sys
from datetime import datetime, timedelta

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from sqlalchemy.exc import SQLAlchemyError

from database import SessionLocal
from enums import TypeAudience
from models import Affaire
import schemas
from services.audience_service import audience_service


def create_test_audience():
    print("Creation d'une audience de test avec rappel d'enrolement...\n")

    db = SessionLocal()
    try:
        affaire = db.query(Affaire).order_by(Affaire.id).first()
        if affaire is None:
            print("Aucune affaire trouvee. Creez d'abord une affaire.")
            return False

        print(f"Affaire trouvee: {affaire.reference}")

        audience = audience_service.creer(db, schemas.AudienceCreate(
            affaire_id=affaire.id,
            date=(datetime.utcnow() + timedelta(days=7)).replace(hour=9, minute=0, second=0, microsecond=0),
            heure="09:00",
            type=TypeAudience.PLAIDOIRIE,
            juridiction="Tribunal de Grande Instance",
            chambre="Chambre Civile",
            ville="Dakar",
            notes_preparation="Audience de test avec rappel d'enrolement",
            rappel_enrolement=True
        ))

        print("Audience creee avec succes:")
        print(f"- ID: {audience.id}")
        print(f"- Date: {audience.date:%d/%m/%Y %H:%M}")
        print(f"- Statut: {audience.statut.value}")
        print(f"- Date rappel: {audience.date_rappel_enrolement:%d/%m/%Y}")
        print(f"- Enrolement effectue: {'Oui' if audience.enrolement_effectue else 'Non'}")

        rappels = audience_service.get_rappels_enrolement(db)
        print(f"\nRappels d'enrolement en attente: {len(rappels)}")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    try:
        if not create_test_audience():
            sys.exit(1)
    except SQLAlchemyError as e:
        print(f"Erreur: {e}")
        sys.exit(1)
