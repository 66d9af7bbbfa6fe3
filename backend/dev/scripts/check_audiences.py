#!/usr/bin/env python3
"""
Affiche les audiences avec leur statut dérivé, les statistiques et les rappels en attente
"""
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from sqlalchemy.exc import SQLAlchemyError

from database import SessionLocal
from services.audience_service import audience_service


def check_audiences():
    db = SessionLocal()
    try:
        audiences = audience_service.lister(db, limit=1000)
        print(f"Audiences ({len(audiences)}):")
        for audience in audiences:
            resultat = audience.resultat.type.value if audience.resultat else "-"
            print(f"  #{audience.id} {audience.date:%Y-%m-%d %H:%M} {audience.affaire.reference} "
                  f"{audience.statut.value} resultat={resultat}")

        stats = audience_service.get_statistiques(db)
        print(f"\nStatistiques: total={stats['total']} a venir={stats['aVenir']} "
              f"non renseignees={stats['nonRenseignees']} tenues={stats['tenues']}")

        rappels = audience_service.get_rappels_enrolement(db)
        print(f"\nRappels d'enrolement en attente ({len(rappels)}):")
        for audience in rappels:
            print(f"  #{audience.id} audience le {audience.date:%Y-%m-%d}, "
                  f"rappel le {audience.date_rappel_enrolement:%Y-%m-%d}")
    finally:
        db.close()


if __name__ == "__main__":
    try:
        check_audiences()
    except SQLAlchemyError as e:
        print(f"Erreur: {e}")
        sys.exit(1)
