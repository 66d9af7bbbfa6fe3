"""
Routes API pour l'import Excel et les modèles de fichiers
"""
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session
import os
import logging

from database import get_db
from auth import lecture, ecriture
from constants import (
    ALLOWED_IMPORT_EXTENSIONS, MAX_IMPORT_FILE_SIZE, XLSX_MEDIA_TYPE, get_error_message
)
from error_handlers import BusinessRuleError
from models import User
from services.import_service import ImportService, valider_type_entite
from services.template_service import generer_template, generer_template_complet, nom_fichier_template

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/immobilier/import", tags=["import"])


def _xlsx_response(contenu: bytes, filename: str) -> Response:
    return Response(
        content=contenu,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


async def _lire_fichier(file: UploadFile) -> bytes:
    """Vérifie l'extension et la taille du fichier envoyé puis le lit"""
    extension = os.path.splitext(file.filename or "")[1].lower()
    if extension not in ALLOWED_IMPORT_EXTENSIONS:
        raise BusinessRuleError(
            f"{get_error_message('INVALID_FILE_TYPE')}: {extension or 'aucune extension'}. "
            f"Extensions autorisées: {', '.join(sorted(ALLOWED_IMPORT_EXTENSIONS))}",
            "INVALID_FILE_TYPE"
        )

    contenu = await file.read()
    if len(contenu) > MAX_IMPORT_FILE_SIZE:
        raise BusinessRuleError(
            f"{get_error_message('FILE_TOO_LARGE')} (max {MAX_IMPORT_FILE_SIZE // (1024 * 1024)} MB)",
            "FILE_TOO_LARGE",
            status_code=413
        )
    if not contenu:
        raise BusinessRuleError(get_error_message("EMPTY_FILE"), "EMPTY_FILE")
    return contenu


@router.get("/template")
async def download_template_complet(current_user: User = Depends(lecture)):
    """Modèle multi-feuilles (Proprietaires, Immeubles, Locataires, Lots)"""
    return _xlsx_response(generer_template_complet(), nom_fichier_template())


@router.get("/template/{entite}")
async def download_template(entite: str, current_user: User = Depends(lecture)):
    kind = valider_type_entite(entite)
    return _xlsx_response(generer_template(kind), nom_fichier_template(kind))


@router.post("")
async def import_complet(
    file: UploadFile = File(...),
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Importe un classeur multi-feuilles dans l'ordre des dépendances"""
    contenu = await _lire_fichier(file)
    logger.info("Import multi-feuilles de %s par %s", file.filename, current_user.email)
    return ImportService(db, user_id=current_user.id).importer_tout(contenu)


@router.post("/{entite}")
async def import_entite(
    entite: str,
    file: UploadFile = File(...),
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """
    Importe une feuille; chaque ligne est enregistrée ou rejetée indépendamment
    """
    kind = valider_type_entite(entite)
    contenu = await _lire_fichier(file)
    logger.info("Import %s de %s par %s", kind.value, file.filename, current_user.email)
    return ImportService(db, user_id=current_user.id).importer(kind, contenu)
