"""
LexImmo - Statut dérivé des audiences, rappels d'enrôlement et statistiques
Run: pytest backend/dev/tests/test_audience_status.py -v
"""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from enums import StatutAudience
from services.audience_status import (
    calculer_statut, calculer_date_rappel, calculer_statistiques,
    est_rappel_en_attente, filtrer_rappels_en_attente, en_utc_naif
)

MAINTENANT = datetime(2024, 6, 12, 10, 0)  # un mercredi


def audience(date, resultats=(), rappel=False, enrolement=False, date_rappel=None):
    return SimpleNamespace(
        date=date,
        resultats=list(resultats),
        rappel_enrolement=rappel,
        enrolement_effectue=enrolement,
        date_rappel_enrolement=date_rappel,
    )


class TestCalculerStatut:
    """Règles de dérivation du statut."""

    def test_date_future_sans_resultat(self):
        assert calculer_statut(MAINTENANT + timedelta(days=3), False, MAINTENANT) == StatutAudience.A_VENIR

    def test_date_passee_sans_resultat(self):
        assert calculer_statut(MAINTENANT - timedelta(days=5), False, MAINTENANT) == \
            StatutAudience.PASSEE_NON_RENSEIGNEE

    def test_resultat_prime_sur_la_date(self):
        """Un résultat rend l'audience RENSEIGNEE, même avant sa date."""
        assert calculer_statut(MAINTENANT - timedelta(days=5), True, MAINTENANT) == StatutAudience.RENSEIGNEE
        assert calculer_statut(MAINTENANT + timedelta(days=5), True, MAINTENANT) == StatutAudience.RENSEIGNEE

    def test_instant_exact_reste_a_venir(self):
        assert calculer_statut(MAINTENANT, False, MAINTENANT) == StatutAudience.A_VENIR

    def test_date_avec_fuseau(self):
        """Une date avec fuseau est comparée en UTC."""
        date = datetime(2024, 6, 12, 11, 30, tzinfo=timezone(timedelta(hours=2)))
        assert en_utc_naif(date) == datetime(2024, 6, 12, 9, 30)
        assert calculer_statut(date, False, MAINTENANT) == StatutAudience.PASSEE_NON_RENSEIGNEE


class TestRappelsEnrolement:
    """Rappels en attente et date de rappel en jours ouvrables."""

    def test_rappel_en_attente(self):
        assert est_rappel_en_attente(audience(MAINTENANT, rappel=True))

    def test_rappel_disparait_apres_enrolement(self):
        assert not est_rappel_en_attente(audience(MAINTENANT, rappel=True, enrolement=True))

    def test_sans_rappel(self):
        assert not est_rappel_en_attente(audience(MAINTENANT))

    def test_statut_sans_incidence(self):
        """Une audience passée ou renseignée reste dans les rappels tant que l'enrôlement n'est pas fait."""
        passee = audience(MAINTENANT - timedelta(days=2), resultats=["R"], rappel=True)
        assert est_rappel_en_attente(passee)

    def test_filtre_trie_par_date(self):
        tardive = audience(MAINTENANT + timedelta(days=10), rappel=True)
        proche = audience(MAINTENANT + timedelta(days=2), rappel=True)
        faite = audience(MAINTENANT + timedelta(days=1), rappel=True, enrolement=True)
        assert filtrer_rappels_en_attente([tardive, faite, proche], maintenant=MAINTENANT) == [proche, tardive]

    def test_filtre_echus_seulement(self):
        echu = audience(MAINTENANT + timedelta(days=2), rappel=True, date_rappel=MAINTENANT - timedelta(days=1))
        futur = audience(MAINTENANT + timedelta(days=10), rappel=True, date_rappel=MAINTENANT + timedelta(days=4))
        assert filtrer_rappels_en_attente([echu, futur], echus_seulement=True, maintenant=MAINTENANT) == [echu]

    def test_date_rappel_en_semaine(self):
        """Vendredi 14 -> 4 jours ouvrables avant = lundi 10."""
        assert calculer_date_rappel(datetime(2024, 6, 14, 9, 0)) == datetime(2024, 6, 10, 9, 0)

    def test_date_rappel_saute_le_week_end(self):
        """Mardi 18 -> 4 jours ouvrables avant = mercredi 12."""
        assert calculer_date_rappel(datetime(2024, 6, 18, 9, 0)) == datetime(2024, 6, 12, 9, 0)


class TestStatistiques:
    """Les compteurs par statut couvrent toutes les audiences."""

    def test_somme_egale_total(self):
        audiences = [
            audience(MAINTENANT + timedelta(days=1)),
            audience(MAINTENANT + timedelta(days=8)),
            audience(MAINTENANT - timedelta(days=3)),
            audience(MAINTENANT - timedelta(days=30), resultats=["R"]),
            audience(MAINTENANT + timedelta(days=2), resultats=["R"]),
        ]
        stats = calculer_statistiques(audiences, MAINTENANT)
        assert stats == {"total": 5, "aVenir": 2, "nonRenseignees": 1, "tenues": 2}
        assert stats["aVenir"] + stats["nonRenseignees"] + stats["tenues"] == stats["total"]

    def test_aucune_audience(self):
        assert calculer_statistiques([], MAINTENANT) == {"total": 0, "aVenir": 0, "nonRenseignees": 0, "tenues": 0}
