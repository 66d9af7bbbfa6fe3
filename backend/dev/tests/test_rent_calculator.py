"""
LexImmo - Calculs de loyers: échéances, impayés et statistiques
Run: pytest backend/dev/tests/test_rent_calculator.py -v
"""
import importlib
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

import constants
from enums import StatutBail
from services import rent_calculator as rc
from services.impayes_service import ImpayesService

AUJOURD_HUI = date(2024, 3, 20)


def immeuble(id=1, nom="Résidence Test"):
    return SimpleNamespace(id=id, nom=nom, reference=f"IMM-{id:03d}")


def bail(id, lot_id, montant="100000", statut=StatutBail.ACTIF, debut=date(2023, 1, 1), fin=None,
         jour=5, imm=None):
    lot = SimpleNamespace(id=lot_id, numero=f"L{lot_id}", immeuble=imm or immeuble())
    locataire = SimpleNamespace(id=id, nom_complet=f"Locataire {id}")
    return SimpleNamespace(
        id=id, lot_id=lot_id, lot=lot, locataire=locataire, montant_loyer=Decimal(montant),
        jour_echeance=jour, date_debut=debut, date_fin=fin, statut=statut
    )


def encaissement(lot_id, montant, mois="2024-03"):
    return SimpleNamespace(lot_id=lot_id, montant_encaisse=Decimal(montant), mois_concerne=mois)


class TestMois:
    """Format YYYY-MM et arithmétique des mois."""

    def test_parse_mois(self):
        assert rc.parse_mois("2024-03") == (2024, 3)

    @pytest.mark.parametrize("mois", ["2024-3", "03-2024", "2024-13", "2024-00", "1999-12", "2101-01", "", "abc"])
    def test_parse_mois_invalide(self, mois):
        with pytest.raises(ValueError):
            rc.parse_mois(mois)

    def test_ajouter_mois_change_d_annee(self):
        assert rc.ajouter_mois("2024-01", -1) == "2023-12"
        assert rc.ajouter_mois("2023-11", 3) == "2024-02"

    def test_date_echeance_bornee_a_la_fin_du_mois(self):
        assert rc.calculer_date_echeance("2024-02", 31) == date(2024, 2, 29)

    def test_jours_retard(self):
        assert rc.calculer_jours_retard("2024-03", 5, AUJOURD_HUI) == 15
        assert rc.calculer_jours_retard("2024-03", 5, date(2024, 3, 5)) == 0
        assert rc.calculer_jours_retard("2024-04", 5, AUJOURD_HUI) == 0


class TestBailAttendu:
    """Prise en compte des baux selon leur statut et la politique configurée."""

    def test_bail_actif(self):
        assert rc.bail_attendu_pour_mois(bail(1, 1), "2024-03")

    def test_bail_commencant_apres_le_mois(self):
        assert not rc.bail_attendu_pour_mois(bail(1, 1, debut=date(2024, 4, 1)), "2024-03")

    def test_bail_inactif_sans_date_de_fin(self):
        assert not rc.bail_attendu_pour_mois(bail(1, 1, statut=StatutBail.RESILIE), "2024-03")

    def test_politique_mois_suivant(self):
        """Le bail compte pour le mois de sa fin, plus après."""
        resilie = bail(1, 1, statut=StatutBail.RESILIE, fin=date(2024, 3, 15))
        assert rc.bail_attendu_pour_mois(resilie, "2024-03", "mois_suivant")
        assert not rc.bail_attendu_pour_mois(resilie, "2024-04", "mois_suivant")

    def test_politique_immediat(self):
        """Le bail ne compte plus dès le mois de sa fin."""
        expire = bail(1, 1, statut=StatutBail.EXPIRE, fin=date(2024, 3, 15))
        assert rc.bail_attendu_pour_mois(expire, "2024-02", "immediat")
        assert not rc.bail_attendu_pour_mois(expire, "2024-03", "immediat")

    def test_politique_inconnue(self):
        with pytest.raises(ValueError):
            rc.bail_attendu_pour_mois(bail(1, 1), "2024-03", "jamais")

    def test_service_refuse_une_politique_inconnue(self):
        with pytest.raises(ValueError):
            ImpayesService(politique="jamais")
        assert ImpayesService(politique="immediat").politique == "immediat"

    def test_politique_invalide_detectee_au_chargement(self, monkeypatch):
        monkeypatch.setenv("POLITIQUE_BAIL_INACTIF", "jamais")
        with pytest.raises(ValueError, match="POLITIQUE_BAIL_INACTIF"):
            importlib.reload(constants)
        monkeypatch.delenv("POLITIQUE_BAIL_INACTIF")
        importlib.reload(constants)
        assert constants.POLITIQUE_BAIL_INACTIF == "mois_suivant"


class TestDetecterImpayes:
    """Lignes d'impayés d'un mois."""

    def test_sans_encaissement_tout_est_impaye(self):
        lignes = rc.detecter_impayes([bail(1, 1)], [], "2024-03", aujourd_hui=AUJOURD_HUI)
        assert len(lignes) == 1
        ligne = lignes[0]
        assert ligne.montantAttendu == 100000.0
        assert ligne.montantEncaisse == 0.0
        assert ligne.montantManquant == 100000.0
        assert ligne.statut == "IMPAYE"
        assert ligne.joursRetard == 15
        assert ligne.dateEcheance == "2024-03-05"

    def test_paiement_partiel(self):
        lignes = rc.detecter_impayes(
            [bail(1, 1)], [encaissement(1, "30000"), encaissement(1, "20000")], "2024-03", aujourd_hui=AUJOURD_HUI
        )
        assert lignes[0].statut == "PARTIEL"
        assert lignes[0].montantEncaisse == 50000.0
        assert lignes[0].montantManquant == 50000.0

    def test_lot_solde_absent(self):
        assert rc.detecter_impayes([bail(1, 1)], [encaissement(1, "100000")], "2024-03") == []

    def test_encaissement_d_un_autre_mois_ignore(self):
        lignes = rc.detecter_impayes([bail(1, 1)], [encaissement(1, "100000", "2024-02")], "2024-03",
                                     aujourd_hui=AUJOURD_HUI)
        assert lignes[0].montantManquant == 100000.0

    def test_tri_retard_puis_montant(self):
        baux = [
            bail(1, 1, montant="50000", jour=10),
            bail(2, 2, montant="80000", jour=5),
            bail(3, 3, montant="120000", jour=5),
        ]
        lignes = rc.detecter_impayes(baux, [], "2024-03", aujourd_hui=AUJOURD_HUI)
        assert [l.lotId for l in lignes] == [3, 2, 1]

    def test_bail_resilie_exclu_le_mois_suivant(self):
        resilie = bail(1, 1, statut=StatutBail.RESILIE, fin=date(2024, 2, 10))
        assert rc.detecter_impayes([resilie], [], "2024-03", "mois_suivant", AUJOURD_HUI) == []
        assert len(rc.detecter_impayes([resilie], [], "2024-02", "mois_suivant", AUJOURD_HUI)) == 1


class TestStatistiquesLoyers:
    """Agrégats mensuels et évolution."""

    def test_totaux_et_taux(self):
        imm_a, imm_b = immeuble(1, "A"), immeuble(2, "B")
        baux = [
            bail(1, 1, montant="100000", imm=imm_a),
            bail(2, 2, montant="200000", imm=imm_a),
            bail(3, 3, montant="250000", imm=imm_b),
            bail(4, 4, montant="50000", imm=imm_b),
        ]
        encaissements = [encaissement(1, "100000"), encaissement(2, "50000"), encaissement(4, "80000")]
        stats = rc.calculer_statistiques_loyers(baux, encaissements, "2024-03", aujourd_hui=AUJOURD_HUI)

        assert stats["totalAttendu"] == 600000.0
        assert stats["totalPayes"] == 230000.0
        # Le trop-perçu du lot 4 ne compense pas les autres impayés
        assert stats["totalImpayes"] == 400000.0
        assert stats["nbImpayes"] == 2
        assert stats["nbLotsAttendus"] == 4
        assert stats["tauxImpayes"] == 50.0
        assert [r["immeubleNom"] for r in stats["repartitionParImmeuble"]] == ["B", "A"]
        assert stats["repartitionParImmeuble"][0]["montant"] == 250000.0
        assert stats["repartitionParImmeuble"][0]["nombreLots"] == 1

    def test_aucun_bail(self):
        stats = rc.calculer_statistiques_loyers([], [], "2024-03")
        assert stats["totalAttendu"] == 0.0
        assert stats["tauxImpayes"] == 0.0

    def test_evolution_mensuelle(self):
        baux = [bail(1, 1, debut=date(2024, 1, 1))]
        encaissements = [encaissement(1, "100000", "2024-02"), encaissement(1, "40000", "2024-03")]
        evolution = rc.evolution_mensuelle(baux, encaissements, "2024-03", nb_mois=4)
        assert evolution == [
            {"mois": "2023-12", "montant": 0.0},
            {"mois": "2024-01", "montant": 100000.0},
            {"mois": "2024-02", "montant": 0.0},
            {"mois": "2024-03", "montant": 60000.0},
        ]
