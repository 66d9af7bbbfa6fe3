#!/usr/bin/env python3
"""
Affiche les impayés et les statistiques de loyers d'un mois
Usage: python dev/scripts/check_impayes.py [YYYY-MM]
"""
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from sqlalchemy.exc import SQLAlchemyError

from database import SessionLocal
from services.impayes_service import impayes_service, mois_courant


def check_impayes(mois: str):
    db = SessionLocal()
    try:
        lignes = impayes_service.detecter_impayes(db, mois)
        print(f"Impayes {mois} ({len(lignes)}):")
        for ligne in lignes:
            print(f"  {ligne.immeubleNom} / lot {ligne.lotNumero} - {ligne.locataireNom}: "
                  f"attendu {ligne.montantAttendu:,.2f}, encaisse {ligne.montantEncaisse:,.2f}, "
                  f"retard {ligne.joursRetard} j ({ligne.statut})")

        stats = impayes_service.get_statistiques(db, mois=mois)
        print(f"\nTotal attendu: {stats['totalAttendu']:,.2f}")
        print(f"Total paye: {stats['totalPayes']:,.2f}")
        print(f"Total impaye: {stats['totalImpayes']:,.2f} ({stats['tauxImpayes']}%)")
        print("\nEvolution:")
        for point in stats["evolutionMensuelle"]:
            print(f"  {point['mois']}: {point['montant']:,.2f}")
    finally:
        db.close()


if __name__ == "__main__":
    try:
        check_impayes(sys.argv[1] if len(sys.argv) > 1 else mois_courant())
    except (ValueError, SQLAlchemyError) as e:
        print(f"Erreur: {e}")
        sys.exit(1)
