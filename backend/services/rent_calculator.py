"""
Calculs sur les loyers: échéances, retards, impayés et statistiques

Toutes les fonctions sont pures et travaillent sur des baux et encaissements
déjà chargés par l'ORM. Les montants sont manipulés en Decimal puis arrondis
au centime à la sortie.
"""
import calendar
import logging
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple, Dict

from enums import StatutBail, StatutImpaye
from constants import (
    JOUR_ECHEANCE_DEFAUT, POLITIQUE_BAIL_INACTIF, POLITIQUES_BAIL_INACTIF,
    NB_MOIS_EVOLUTION_IMPAYES
)
from validators import CommonValidators

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENTIME = Decimal("0.01")


@dataclass
class LigneImpaye:
    """Impayé d'un lot pour un mois"""
    lotId: int
    lotNumero: str
    immeubleId: int
    immeubleNom: str
    immeubleReference: Optional[str]
    locataireId: Optional[int]
    locataireNom: str
    moisConcerne: str
    montantAttendu: float
    montantEncaisse: float
    montantManquant: float
    joursRetard: int
    statut: str
    dateEcheance: str

    def to_dict(self):
        return asdict(self)


def parse_mois(mois: str) -> Tuple[int, int]:
    """
    Découpe un mois "YYYY-MM" en (année, mois)

    Lève ValueError si le format, l'année (2000..2100) ou le mois (1..12) est invalide.
    """
    CommonValidators.validate_mois(mois)
    return int(mois[:4]), int(mois[5:7])


def format_mois(annee: int, mois: int) -> str:
    return f"{annee:04d}-{mois:02d}"


def mois_de(valeur: date) -> str:
    return format_mois(valeur.year, valeur.month)


def ajouter_mois(mois: str, delta: int) -> str:
    annee, numero = parse_mois(mois)
    index = annee * 12 + (numero - 1) + delta
    return format_mois(index // 12, index % 12 + 1)


def calculer_date_echeance(mois: str, jour: int = JOUR_ECHEANCE_DEFAUT) -> date:
    """Date d'exigibilité du loyer: le `jour` du mois (borné à la fin du mois)"""
    annee, numero = parse_mois(mois)
    dernier_jour = calendar.monthrange(annee, numero)[1]
    return date(annee, numero, min(jour, dernier_jour))


def calculer_jours_retard(mois: str, jour: int = JOUR_ECHEANCE_DEFAUT, aujourd_hui: Optional[date] = None) -> int:
    """Nombre de jours écoulés depuis l'échéance, 0 avant ou le jour même"""
    aujourd_hui = aujourd_hui or date.today()
    echeance = calculer_date_echeance(mois, jour)
    return max(0, (aujourd_hui - echeance).days)


def bail_attendu_pour_mois(bail, mois: str, politique: str = POLITIQUE_BAIL_INACTIF) -> bool:
    """
    Indique si un bail génère un loyer attendu pour le mois

    - un bail commençant après le mois n'est pas attendu
    - un bail ACTIF est attendu
    - un bail inactif (RESILIE, EXPIRE) sans date de fin n'est pas attendu
    - mois_suivant: le bail inactif compte encore pour le mois de sa fin
    - immediat: le bail inactif ne compte plus dès le mois de sa fin
    """
    if politique not in POLITIQUES_BAIL_INACTIF:
        raise ValueError(f"Politique de bail inactif inconnue: {politique}")

    parse_mois(mois)
    if bail.date_debut is not None and mois_de(bail.date_debut) > mois:
        return False

    if bail.statut == StatutBail.ACTIF:
        return True

    if bail.date_fin is None:
        return False

    mois_fin = mois_de(bail.date_fin)
    if politique == "immediat":
        return mois < mois_fin
    return mois <= mois_fin


def _encaisse_par_lot(encaissements: Iterable, mois: str) -> Dict[int, Decimal]:
    totaux = defaultdict(lambda: ZERO)
    for enc in encaissements:
        if enc.mois_concerne == mois:
            totaux[enc.lot_id] += Decimal(enc.montant_encaisse or 0)
    return totaux


def _attendu_par_lot(baux: Iterable, mois: str, politique: str):
    """Regroupe les baux attendus par lot: {lot_id: (montant, bail de référence)}"""
    attendus = {}
    for bail in baux:
        if not bail_attendu_pour_mois(bail, mois, politique):
            continue
        montant = Decimal(bail.montant_loyer or 0)
        if montant <= 0:
            logger.warning("Bail %s sans loyer valide, ignoré", bail.id)
            continue
        if bail.lot_id in attendus:
            total, reference = attendus[bail.lot_id]
            # Le bail le plus récent fournit le locataire affiché
            if bail.date_debut and reference.date_debut and bail.date_debut > reference.date_debut:
                reference = bail
            attendus[bail.lot_id] = (total + montant, reference)
        else:
            attendus[bail.lot_id] = (montant, bail)
    return attendus


def detecter_impayes(baux: Iterable, encaissements: Iterable, mois: str,
                     politique: str = POLITIQUE_BAIL_INACTIF,
                     aujourd_hui: Optional[date] = None) -> List[LigneImpaye]:
    """
    Lignes d'impayés du mois, triées par retard décroissant puis montant manquant décroissant

    Un lot attendu sans aucun encaissement compte la totalité de son loyer comme impayé.
    """
    parse_mois(mois)
    baux = list(baux)
    encaisse = _encaisse_par_lot(encaissements, mois)

    lignes = []
    for lot_id, (attendu, bail) in _attendu_par_lot(baux, mois, politique).items():
        montant_encaisse = encaisse.get(lot_id, ZERO)
        manquant = attendu - montant_encaisse
        if manquant <= 0:
            continue

        jour = bail.jour_echeance or JOUR_ECHEANCE_DEFAUT
        lot = bail.lot
        immeuble = lot.immeuble if lot is not None else None
        locataire = bail.locataire

        lignes.append(LigneImpaye(
            lotId=lot_id,
            lotNumero=lot.numero if lot is not None else "",
            immeubleId=immeuble.id if immeuble is not None else None,
            immeubleNom=immeuble.nom if immeuble is not None else "",
            immeubleReference=immeuble.reference if immeuble is not None else None,
            locataireId=locataire.id if locataire is not None else None,
            locataireNom=locataire.nom_complet if locataire is not None else "Non renseigné",
            moisConcerne=mois,
            montantAttendu=float(attendu.quantize(CENTIME)),
            montantEncaisse=float(montant_encaisse.quantize(CENTIME)),
            montantManquant=float(manquant.quantize(CENTIME)),
            joursRetard=calculer_jours_retard(mois, jour, aujourd_hui),
            statut=(StatutImpaye.IMPAYE if montant_encaisse == 0 else StatutImpaye.PARTIEL).value,
            dateEcheance=calculer_date_echeance(mois, jour).isoformat(),
        ))

    lignes.sort(key=lambda l: (-l.joursRetard, -l.montantManquant))
    return lignes


def calculer_statistiques_loyers(baux: Iterable, encaissements: Iterable, mois: str,
                                 politique: str = POLITIQUE_BAIL_INACTIF,
                                 aujourd_hui: Optional[date] = None) -> dict:
    """
    Agrégats du mois: attendu, encaissé, impayés (restes positifs uniquement),
    taux d'impayés et répartition par immeuble
    """
    baux = list(baux)
    encaissements = list(encaissements)
    attendus = _attendu_par_lot(baux, mois, politique)
    encaisse = _encaisse_par_lot(encaissements, mois)

    total_attendu = sum((montant for montant, _ in attendus.values()), ZERO)
    total_payes = sum((encaisse.get(lot_id, ZERO) for lot_id in attendus), ZERO)

    lignes = detecter_impayes(baux, encaissements, mois, politique, aujourd_hui)
    total_impayes = sum((Decimal(str(l.montantManquant)) for l in lignes), ZERO)

    repartition = {}
    for ligne in lignes:
        stats = repartition.setdefault(ligne.immeubleId, {
            "immeubleId": ligne.immeubleId,
            "immeubleNom": ligne.immeubleNom,
            "montant": ZERO,
            "nombreLots": 0,
        })
        stats["montant"] += Decimal(str(ligne.montantManquant))
        stats["nombreLots"] += 1

    repartition_triee = sorted(repartition.values(), key=lambda r: r["montant"], reverse=True)
    for stats in repartition_triee:
        stats["montant"] = float(stats["montant"].quantize(CENTIME))

    nb_attendus = len(attendus)
    taux = round(len(lignes) * 100 / nb_attendus, 2) if nb_attendus else 0.0

    return {
        "mois": mois,
        "totalAttendu": float(total_attendu.quantize(CENTIME)),
        "totalPayes": float(total_payes.quantize(CENTIME)),
        "totalImpayes": float(total_impayes.quantize(CENTIME)),
        "nbImpayes": len(lignes),
        "nbLotsAttendus": nb_attendus,
        "tauxImpayes": taux,
        "repartitionParImmeuble": repartition_triee,
    }


def evolution_mensuelle(baux: Iterable, encaissements: Iterable, mois_fin: str,
                        nb_mois: int = NB_MOIS_EVOLUTION_IMPAYES,
                        politique: str = POLITIQUE_BAIL_INACTIF) -> List[dict]:
    """Total des impayés des `nb_mois` derniers mois, du plus ancien au plus récent"""
    baux = list(baux)
    encaissements = list(encaissements)
    evolution = []
    for delta in range(nb_mois - 1, -1, -1):
        mois = ajouter_mois(mois_fin, -delta)
        attendus = _attendu_par_lot(baux, mois, politique)
        encaisse = _encaisse_par_lot(encaissements, mois)
        montant = ZERO
        for lot_id, (attendu, _) in attendus.items():
            manquant = attendu - encaisse.get(lot_id, ZERO)
            if manquant > 0:
                montant += manquant
        evolution.append({"mois": mois, "montant": float(montant.quantize(CENTIME))})
    return evolution
