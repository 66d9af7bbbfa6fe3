"""
Statut dérivé des audiences et rappels d'enrôlement

Fonctions pures: elles travaillent sur des objets déjà chargés (modèles ORM ou
tout objet exposant les mêmes attributs) et n'accèdent jamais à la base.
"""
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Dict

from enums import StatutAudience
from constants import JOURS_OUVRABLES_RAPPEL_ENROLEMENT


def en_utc_naif(valeur: Optional[datetime]) -> Optional[datetime]:
    """Les dates sont stockées en UTC sans fuseau"""
    if valeur is not None and valeur.tzinfo is not None:
        return valeur.astimezone(timezone.utc).replace(tzinfo=None)
    return valeur


def calculer_statut(date_audience: datetime, a_resultat: bool, maintenant: Optional[datetime] = None) -> StatutAudience:
    """
    Calcule le statut d'une audience:
    - RENSEIGNEE si un résultat a été enregistré
    - PASSEE_NON_RENSEIGNEE si la date est passée sans résultat
    - A_VENIR sinon
    """
    if a_resultat:
        return StatutAudience.RENSEIGNEE

    maintenant = en_utc_naif(maintenant) or datetime.utcnow()
    if en_utc_naif(date_audience) < maintenant:
        return StatutAudience.PASSEE_NON_RENSEIGNEE

    return StatutAudience.A_VENIR


def statut_audience(audience, maintenant: Optional[datetime] = None) -> StatutAudience:
    return calculer_statut(audience.date, bool(audience.resultats), maintenant)


def est_rappel_en_attente(audience) -> bool:
    """Un rappel est en attente tant que l'enrôlement n'est pas effectué, quel que soit le statut"""
    return bool(audience.rappel_enrolement) and not audience.enrolement_effectue


def filtrer_rappels_en_attente(audiences: Iterable, echus_seulement: bool = False,
                               maintenant: Optional[datetime] = None) -> List:
    """
    Retourne les audiences ayant un rappel d'enrôlement en attente, triées par date d'audience

    Avec echus_seulement, seuls les rappels dont la date est atteinte sont conservés.
    """
    maintenant = en_utc_naif(maintenant) or datetime.utcnow()
    rappels = []
    for audience in audiences:
        if not est_rappel_en_attente(audience):
            continue
        if echus_seulement:
            date_rappel = audience.date_rappel_enrolement
            if date_rappel is None or date_rappel > maintenant:
                continue
        rappels.append(audience)
    return sorted(rappels, key=lambda a: a.date)


def calculer_date_rappel(date_audience: datetime, jours_ouvrables: int = JOURS_OUVRABLES_RAPPEL_ENROLEMENT) -> datetime:
    """
    Date de rappel d'enrôlement: N jours ouvrables (lundi-vendredi) avant l'audience
    """
    date = date_audience
    comptes = 0
    while comptes < jours_ouvrables:
        date = date - timedelta(days=1)
        # weekday(): samedi = 5, dimanche = 6
        if date.weekday() < 5:
            comptes += 1
    return date


def calculer_statistiques(audiences: Iterable, maintenant: Optional[datetime] = None) -> Dict[str, int]:
    """
    Compte les audiences par statut dérivé

    aVenir + nonRenseignees + tenues == total
    """
    maintenant = maintenant or datetime.utcnow()
    stats = {"total": 0, "aVenir": 0, "nonRenseignees": 0, "tenues": 0}
    for audience in audiences:
        statut = statut_audience(audience, maintenant)
        stats["total"] += 1
        if statut == StatutAudience.RENSEIGNEE:
            stats["tenues"] += 1
        elif statut == StatutAudience.PASSEE_NON_RENSEIGNEE:
            stats["nonRenseignees"] += 1
        else:
            stats["aVenir"] += 1
    return stats
