"""
Import Excel des entités de gestion locative

Chaque ligne est validée puis enregistrée dans son propre SAVEPOINT: une ligne
en erreur n'empêche jamais l'enregistrement des autres.
"""
import datetime
import logging
import zipfile
from io import BytesIO
from typing import Dict, List, Optional

from openpyxl import load_workbook
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from audit_logger import AuditLogger
from base_crud import generer_reference
from constants import get_error_message
from enums import ActionType, EntityType, ImportEntityType, StatutLot, TypeLot
from error_handlers import BusinessRuleError
from models import Proprietaire, Immeuble, Locataire, Lot
from services.template_service import IMPORT_SCHEMAS, ORDRE_IMPORT, get_schema
from validators import CommonValidators, PropertyValidators, FinancialValidators

logger = logging.getLogger(__name__)


class LigneInvalide(Exception):
    """Erreurs de validation d'une ligne: liste de {champ, message}"""

    def __init__(self, erreurs: List[Dict[str, str]]):
        super().__init__("; ".join(f"{e['champ']}: {e['message']}" for e in erreurs))
        self.erreurs = erreurs


def _texte(valeur) -> Optional[str]:
    """Normalise une cellule Excel en texte (les nombres entiers perdent leur '.0')"""
    if valeur is None:
        return None
    if isinstance(valeur, float) and valeur.is_integer():
        valeur = int(valeur)
    if isinstance(valeur, (datetime.datetime, datetime.date)):
        return valeur.isoformat()[:10]
    texte = str(valeur).strip()
    return texte or None


def ouvrir_classeur(contenu: bytes):
    if not contenu:
        raise BusinessRuleError(get_error_message("EMPTY_FILE"), "EMPTY_FILE")
    try:
        return load_workbook(BytesIO(contenu), read_only=True, data_only=True)
    except (zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        logger.warning("Fichier Excel illisible: %s", e)
        raise BusinessRuleError("Fichier Excel illisible", "INVALID_FILE")


def trouver_feuille(wb, kind: ImportEntityType, defaut_premiere: bool = True):
    """Feuille portant le nom de l'entité (sans tenir compte de la casse), sinon la première"""
    nom = IMPORT_SCHEMAS[kind]["sheet"].lower()
    for sheet_name in wb.sheetnames:
        if sheet_name.lower().replace("é", "e").startswith(nom[:-1]):
            return wb[sheet_name]
    return wb[wb.sheetnames[0]] if defaut_premiere else None


def lire_lignes(ws) -> List[Dict]:
    """
    Lit une feuille: en-têtes en minuscules, lignes vides ignorées

    Chaque ligne porte son numéro Excel dans `_ligne` (en-tête = ligne 1).
    """
    rows = ws.iter_rows(values_only=True)
    try:
        entetes = next(rows)
    except StopIteration:
        raise BusinessRuleError(get_error_message("EMPTY_FILE"), "EMPTY_FILE")

    entetes = [(_texte(h) or "").lower() for h in entetes]
    if not any(entetes):
        raise BusinessRuleError("Ligne d'en-tête manquante", "MISSING_HEADER")

    lignes = []
    for numero, row in enumerate(rows, start=2):
        valeurs = {}
        for entete, valeur in zip(entetes, row):
            if entete:
                valeurs[entete] = valeur
        if all(_texte(v) is None for v in valeurs.values()):
            continue
        valeurs["_ligne"] = numero
        lignes.append(valeurs)
    return lignes


class ImportService:

    def __init__(self, db: Session, user_id: Optional[int] = None):
        self.db = db
        self.user_id = user_id

    # ---------- validation ----------

    @staticmethod
    def _verifier(erreurs: list, champ: str, fonction, valeur):
        try:
            return fonction(valeur)
        except ValueError as e:
            erreurs.append({"champ": champ, "message": str(e)})
            return None

    def _valider_commun(self, kind: ImportEntityType, row: dict) -> List[Dict[str, str]]:
        schema = IMPORT_SCHEMAS[kind]
        erreurs = []
        for champ in schema["obligatoires"]:
            if _texte(row.get(champ)) is None:
                erreurs.append({"champ": champ, "message": f"Le champ '{champ}' est obligatoire"})
        for champ, valeurs in schema["enums"].items():
            valeur = _texte(row.get(champ))
            if valeur is not None and valeur.upper() not in valeurs:
                erreurs.append({
                    "champ": champ,
                    "message": f"Valeur invalide '{valeur}'. Valeurs autorisées: {', '.join(valeurs)}"
                })
        return erreurs

    def _find_by_nom(self, model, nom: str):
        return self.db.query(model).filter(func.lower(model.nom) == nom.lower()).first()

    def _find_locataire(self, nom_complet: str):
        """Recherche par 'nom prenom' puis par nom seul"""
        cible = " ".join(nom_complet.lower().split())
        candidats = self.db.query(Locataire).filter(
            func.lower(Locataire.nom).in_([cible, cible.split(" ")[0]])
        ).order_by(Locataire.id).all()
        for locataire in candidats:
            if locataire.nom_complet.lower() == cible or locataire.nom.lower() == cible:
                return locataire
        return None

    # ---------- création par entité ----------

    def _creer_proprietaire(self, row: dict):
        erreurs = self._valider_commun(ImportEntityType.PROPRIETAIRES, row)
        telephone = self._verifier(erreurs, "telephone", CommonValidators.validate_telephone, _texte(row.get("telephone")))
        email = self._verifier(erreurs, "email", CommonValidators.validate_email, _texte(row.get("email")))
        if erreurs:
            raise LigneInvalide(erreurs)

        nom = _texte(row["nom"])
        if self._find_by_nom(Proprietaire, nom):
            raise LigneInvalide([{"champ": "nom", "message": f"Propriétaire déjà existant: {nom}"}])

        return Proprietaire(nom=nom, telephone=telephone, email=email, adresse=_texte(row.get("adresse")))

    def _creer_immeuble(self, row: dict):
        erreurs = self._valider_commun(ImportEntityType.IMMEUBLES, row)
        taux = self._verifier(erreurs, "taux_commission", FinancialValidators.validate_percentage, row.get("taux_commission"))

        proprietaire = None
        proprietaire_nom = _texte(row.get("proprietaire_nom"))
        if proprietaire_nom:
            proprietaire = self._find_by_nom(Proprietaire, proprietaire_nom)
            if proprietaire is None:
                erreurs.append({"champ": "proprietaire_nom", "message": f"Propriétaire introuvable: {proprietaire_nom}"})

        nom = _texte(row.get("nom"))
        if nom and self._find_by_nom(Immeuble, nom):
            erreurs.append({"champ": "nom", "message": f"Immeuble déjà existant: {nom}"})
        if erreurs:
            raise LigneInvalide(erreurs)

        return Immeuble(
            reference=generer_reference(self.db, Immeuble, "IMM", avec_annee=False, largeur=3),
            nom=nom,
            adresse=_texte(row["adresse"]),
            proprietaire_id=proprietaire.id,
            taux_commission=taux,
            notes=_texte(row.get("notes"))
        )

    def _creer_locataire(self, row: dict):
        erreurs = self._valider_commun(ImportEntityType.LOCATAIRES, row)
        telephone = self._verifier(erreurs, "telephone", CommonValidators.validate_telephone, _texte(row.get("telephone")))
        email = self._verifier(erreurs, "email", CommonValidators.validate_email, _texte(row.get("email")))
        date_naissance = self._verifier(erreurs, "date_naissance", CommonValidators.validate_date_iso, row.get("date_naissance"))
        if date_naissance and date_naissance > datetime.date.today():
            erreurs.append({"champ": "date_naissance", "message": "La date de naissance ne peut pas être dans le futur"})
        if erreurs:
            raise LigneInvalide(erreurs)

        return Locataire(
            nom=_texte(row["nom"]),
            prenom=_texte(row.get("prenom")),
            telephone=telephone,
            email=email,
            date_naissance=date_naissance
        )

    def _creer_lot(self, row: dict):
        erreurs = self._valider_commun(ImportEntityType.LOTS, row)
        etage = self._verifier(erreurs, "etage", PropertyValidators.validate_floor_number, row.get("etage"))
        loyer = self._verifier(erreurs, "loyer_mensuel", FinancialValidators.validate_amount, row.get("loyer_mensuel"))

        immeuble = None
        immeuble_nom = _texte(row.get("immeuble_nom"))
        if immeuble_nom:
            immeuble = self._find_by_nom(Immeuble, immeuble_nom)
            if immeuble is None:
                erreurs.append({"champ": "immeuble_nom", "message": f"Immeuble introuvable: {immeuble_nom}"})

        locataire = None
        locataire_nom = _texte(row.get("locataire_nom"))
        if locataire_nom:
            locataire = self._find_locataire(locataire_nom)
            if locataire is None:
                erreurs.append({"champ": "locataire_nom", "message": f"Locataire introuvable: {locataire_nom}"})

        numero = _texte(row.get("numero"))
        if immeuble is not None and numero and self.db.query(Lot).filter(
            Lot.immeuble_id == immeuble.id, Lot.numero == numero
        ).first():
            erreurs.append({"champ": "numero", "message": f"Lot {numero} déjà existant dans {immeuble.nom}"})
        if erreurs:
            raise LigneInvalide(erreurs)

        type_lot = _texte(row.get("type"))
        statut = _texte(row.get("statut"))
        if statut:
            statut = StatutLot(statut.upper())
        else:
            statut = StatutLot.OCCUPE if locataire else StatutLot.LIBRE

        return Lot(
            immeuble_id=immeuble.id,
            numero=numero,
            type=TypeLot(type_lot.upper()) if type_lot else TypeLot.AUTRE,
            etage=etage,
            loyer_mensuel_attendu=loyer,
            statut=statut,
            locataire_id=locataire.id if locataire else None
        )

    CREATEURS = {
        ImportEntityType.PROPRIETAIRES: ("_creer_proprietaire", EntityType.PROPRIETAIRE),
        ImportEntityType.IMMEUBLES: ("_creer_immeuble", EntityType.IMMEUBLE),
        ImportEntityType.LOCATAIRES: ("_creer_locataire", EntityType.LOCATAIRE),
        ImportEntityType.LOTS: ("_creer_lot", EntityType.LOT),
    }

    # ---------- import ----------

    def importer_lignes(self, kind: ImportEntityType, lignes: List[Dict]) -> dict:
        createur_nom, entity_type = self.CREATEURS[kind]
        createur = getattr(self, createur_nom)

        resultats = []
        for row in lignes:
            numero = row["_ligne"]
            try:
                with self.db.begin_nested():
                    entite = createur(row)
                    self.db.add(entite)
                    self.db.flush()
                resultats.append({"ligne": numero, "succes": True, "id": entite.id, "erreurs": []})
            except LigneInvalide as e:
                resultats.append({"ligne": numero, "succes": False, "id": None, "erreurs": e.erreurs})
            except SQLAlchemyError as e:
                logger.warning("Import %s, ligne %s rejetée par la base: %s", kind.value, numero, e)
                resultats.append({
                    "ligne": numero, "succes": False, "id": None,
                    "erreurs": [{"champ": "ligne", "message": "Erreur d'enregistrement en base de données"}]
                })

        self.db.commit()

        reussies = sum(1 for r in resultats if r["succes"])
        resultat = {
            "entite": kind.value,
            "totalLignes": len(resultats),
            "lignesReussies": reussies,
            "lignesEchouees": len(resultats) - reussies,
            "resultats": resultats,
        }
        logger.info("Import %s: %s/%s lignes importées", kind.value, reussies, len(resultats))

        AuditLogger.log_action(
            db=self.db,
            action=ActionType.IMPORT,
            entity_type=entity_type,
            description=f"Import Excel {kind.value}: {reussies}/{len(resultats)} lignes",
            user_id=self.user_id,
            details={k: v for k, v in resultat.items() if k != "resultats"},
            status_code=200
        )
        return resultat

    def importer(self, kind, contenu: bytes) -> dict:
        kind = ImportEntityType(kind)
        wb = ouvrir_classeur(contenu)
        try:
            lignes = lire_lignes(trouver_feuille(wb, kind))
        finally:
            wb.close()
        return self.importer_lignes(kind, lignes)

    def importer_tout(self, contenu: bytes) -> dict:
        """Import multi-feuilles: Proprietaires, Immeubles, Locataires puis Lots"""
        wb = ouvrir_classeur(contenu)
        try:
            feuilles = {kind: trouver_feuille(wb, kind, defaut_premiere=False) for kind in ORDRE_IMPORT}
            if not any(feuilles.values()):
                raise BusinessRuleError(
                    "Aucune feuille reconnue (Proprietaires, Immeubles, Locataires, Lots)", "MISSING_SHEETS"
                )
            lignes_par_kind = {kind: lire_lignes(ws) for kind, ws in feuilles.items() if ws is not None}
        finally:
            wb.close()

        resultats = {}
        for kind in ORDRE_IMPORT:
            if kind in lignes_par_kind:
                resultats[kind.value] = self.importer_lignes(kind, lignes_par_kind[kind])

        return {
            "totalLignes": sum(r["totalLignes"] for r in resultats.values()),
            "lignesReussies": sum(r["lignesReussies"] for r in resultats.values()),
            "lignesEchouees": sum(r["lignesEchouees"] for r in resultats.values()),
            "entites": resultats,
        }


def valider_type_entite(kind: str) -> ImportEntityType:
    """Convertit le paramètre d'URL (insensible à la casse) en type d'entité"""
    try:
        get_schema(kind.upper())
    except ValueError as e:
        raise BusinessRuleError(str(e), "INVALID_ENTITY_TYPE")
    return ImportEntityType(kind.upper())
