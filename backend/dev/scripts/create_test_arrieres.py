#!/usr/bin/env python3
"""
Crée des arriérés de loyers de test: un lot loué sans encaissement
pour le mois courant, un encaissement partiel le mois précédent
et un arriéré antérieur au bail, partiellement apuré
"""
import os
import sys
from datetime import date
from decimal import Decimal

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from sqlalchemy.exc import SQLAlchemyError

from base_crud import generer_reference
from database import SessionLocal
from enums import StatutLot, StatutBail, TypeLot, ModePaiement
from models import Proprietaire, Immeuble, Locataire, Lot, Bail, EncaissementLoyer, Arrierage
from schemas import ArrierageCreate, PaiementPartielCreate
from services.arrierage_service import arrierage_service
from services.impayes_service import impayes_service, mois_courant
from services.rent_calculator import ajouter_mois

LOYER = Decimal("150000")


def get_or_create_lot_loue(db) -> Lot:
    """Premier lot disposant d'un bail actif, ou jeu de données minimal"""
    bail = db.query(Bail).filter(Bail.statut == StatutBail.ACTIF).order_by(Bail.id).first()
    if bail is not None:
        return bail.lot

    print("Aucun bail actif trouve. Creation des donnees de base...")
    proprietaire = Proprietaire(nom="Proprietaire Test", telephone="+221 77 123 45 67",
                                email="proprietaire@test.com")
    db.add(proprietaire)
    db.flush()

    immeuble = Immeuble(
        reference=generer_reference(db, Immeuble, "IMM", avec_annee=False, largeur=3),
        nom="Immeuble Test", adresse="123 Rue de Test, Dakar",
        proprietaire_id=proprietaire.id, taux_commission=Decimal("5")
    )
    locataire = Locataire(nom="Locataire", prenom="Test", telephone="+221 77 987 65 43",
                          email="locataire@test.com")
    db.add_all([immeuble, locataire])
    db.flush()

    lot = Lot(immeuble_id=immeuble.id, numero="A01", etage=1, type=TypeLot.F3,
              loyer_mensuel_attendu=LOYER, statut=StatutLot.OCCUPE, locataire_id=locataire.id)
    db.add(lot)
    db.flush()

    db.add(Bail(lot_id=lot.id, locataire_id=locataire.id, montant_loyer=LOYER,
                jour_echeance=5, date_debut=date(2024, 1, 1), statut=StatutBail.ACTIF))
    db.commit()
    return lot


def create_test_arrieres():
    print("Creation d'arrieres de test...\n")

    db = SessionLocal()
    try:
        lot = get_or_create_lot_loue(db)
        mois = mois_courant()
        mois_precedent = ajouter_mois(mois, -1)

        deja = db.query(EncaissementLoyer).filter(
            EncaissementLoyer.lot_id == lot.id,
            EncaissementLoyer.mois_concerne == mois_precedent
        ).first()
        if deja is None:
            db.add(EncaissementLoyer(
                lot_id=lot.id, mois_concerne=mois_precedent, montant_encaisse=LOYER / 2,
                date_encaissement=date.today(), mode_paiement=ModePaiement.ESPECES,
                observation="Paiement partiel de test"
            ))
            db.commit()
            print(f"Encaissement partiel cree pour le lot {lot.numero} ({mois_precedent})")

        if db.query(Arrierage).filter(Arrierage.lot_id == lot.id).first() is None:
            arrierage = arrierage_service.creer(db, ArrierageCreate(
                lot_id=lot.id, periode_debut=date(2023, 7, 1), periode_fin=date(2023, 12, 31),
                montant_du=LOYER * 6, description="Loyers impayés avant la prise en gestion"
            ))
            arrierage = arrierage_service.enregistrer_paiement(db, arrierage.id, PaiementPartielCreate(
                date=date.today(), montant=LOYER, mode=ModePaiement.ESPECES, commentaire="Acompte de test"
            ))
            print(f"Arriere cree pour le lot {lot.numero}: {arrierage.montant_restant:,.0f} restant "
                  f"sur {arrierage.montant_du:,.0f} ({arrierage.statut.value})")

        for periode in (mois_precedent, mois):
            lignes = impayes_service.detecter_impayes(db, periode)
            print(f"\nImpayes {periode}: {len(lignes)}")
            for ligne in lignes:
                print(f"  Lot {ligne.lotNumero} ({ligne.immeubleNom}) - {ligne.locataireNom}: "
                      f"{ligne.montantManquant:,.0f} manquant, {ligne.joursRetard} jours, {ligne.statut}")
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    try:
        create_test_arrieres()
    except SQLAlchemyError as e:
        print(f"Erreur: {e}")
        sys.exit(1)
