"""
Routes API pour la gestion locative
Propriétaires, immeubles, lots, locataires, baux, encaissements, dépenses et alertes
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from auth import lecture, ecriture, admin_seulement
from base_crud import BaseCRUDService, generer_reference
from constants import MAX_PAGE_SIZE
from enums import EntityType, StatutLot, StatutBail
from error_handlers import NotFoundError
from models import (
    User, Proprietaire, Immeuble, Lot, Locataire, Bail, EncaissementLoyer, DepenseImmeuble, Alerte
)
from schemas import (
    ProprietaireCreate, ProprietaireUpdate, ProprietaireOut,
    ImmeubleCreate, ImmeubleUpdate, ImmeubleOut,
    LotCreate, LotUpdate, LotOut,
    LocataireCreate, LocataireUpdate, LocataireOut,
    BailCreate, BailUpdate, BailOut,
    EncaissementCreate, EncaissementOut,
    DepenseCreate, DepenseOut,
    AlerteOut
)
from services.alerte_service import alerte_service
from services.impayes_service import impayes_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/immobilier", tags=["immobilier"])

proprietaire_service = BaseCRUDService(Proprietaire, EntityType.PROPRIETAIRE, "Propriétaire")
immeuble_service = BaseCRUDService(Immeuble, EntityType.IMMEUBLE, "Immeuble")
lot_service = BaseCRUDService(Lot, EntityType.LOT, "Lot")
locataire_service = BaseCRUDService(Locataire, EntityType.LOCATAIRE, "Locataire")
bail_service = BaseCRUDService(Bail, EntityType.BAIL, "Bail")
encaissement_service = BaseCRUDService(EncaissementLoyer, EntityType.ENCAISSEMENT, "Encaissement")
depense_service = BaseCRUDService(DepenseImmeuble, EntityType.DEPENSE, "Dépense")


def _verifier_existence(db: Session, service: BaseCRUDService, id: Optional[int]):
    """404 si la référence fournie ne correspond à aucun enregistrement"""
    if id is not None:
        service.get_or_404(db, id)


def _statut_occupation(valeurs: dict, statut_actuel: Optional[StatutLot] = None) -> dict:
    """
    Aligne le statut du lot sur son locataire: OCCUPE s'il en a un, LIBRE s'il est libéré
    """
    if "locataire_id" not in valeurs:
        return valeurs
    if valeurs["locataire_id"] is not None:
        valeurs["statut"] = StatutLot.OCCUPE
    elif valeurs.get("statut", statut_actuel) != StatutLot.MAINTENANCE:
        valeurs["statut"] = StatutLot.LIBRE
    return valeurs


# ---------------------- PROPRIÉTAIRES ----------------------

@router.get("/proprietaires", response_model=List[ProprietaireOut])
async def list_proprietaires(
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    query = db.query(Proprietaire)
    if search:
        query = query.filter(Proprietaire.nom.ilike(f"%{search}%"))
    return query.order_by(Proprietaire.nom).offset(skip).limit(limit).all()


@router.post("/proprietaires", response_model=ProprietaireOut, status_code=201)
async def create_proprietaire(
    proprietaire: ProprietaireCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return proprietaire_service.create(db, proprietaire, user_id=current_user.id, request=request)


@router.get("/proprietaires/{proprietaire_id}", response_model=ProprietaireOut)
async def get_proprietaire(
    proprietaire_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return proprietaire_service.get_or_404(db, proprietaire_id)


@router.patch("/proprietaires/{proprietaire_id}", response_model=ProprietaireOut)
async def update_proprietaire(
    proprietaire_id: int,
    proprietaire: ProprietaireUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    db_obj = proprietaire_service.get_or_404(db, proprietaire_id)
    return proprietaire_service.update(db, db_obj, proprietaire, user_id=current_user.id, request=request)


@router.delete("/proprietaires/{proprietaire_id}")
async def delete_proprietaire(
    proprietaire_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    proprietaire_service.delete(db, proprietaire_id, user_id=current_user.id, request=request)
    return {"message": "Propriétaire supprimé"}


# ---------------------- IMMEUBLES ----------------------

@router.get("/immeubles", response_model=List[ImmeubleOut])
async def list_immeubles(
    proprietaire_id: Optional[int] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    query = db.query(Immeuble)
    if proprietaire_id:
        query = query.filter(Immeuble.proprietaire_id == proprietaire_id)
    if search:
        motif = f"%{search}%"
        query = query.filter(or_(
            Immeuble.nom.ilike(motif),
            Immeuble.reference.ilike(motif),
            Immeuble.adresse.ilike(motif),
        ))
    return query.order_by(Immeuble.nom).offset(skip).limit(limit).all()


@router.post("/immeubles", response_model=ImmeubleOut, status_code=201)
async def create_immeuble(
    immeuble: ImmeubleCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    _verifier_existence(db, proprietaire_service, immeuble.proprietaire_id)
    reference = immeuble.reference or generer_reference(db, Immeuble, "IMM", avec_annee=False, largeur=3)
    return immeuble_service.create(db, immeuble, user_id=current_user.id, request=request, reference=reference)


@router.get("/immeubles/{immeuble_id}", response_model=ImmeubleOut)
async def get_immeuble(
    immeuble_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return immeuble_service.get_or_404(db, immeuble_id)


@router.patch("/immeubles/{immeuble_id}", response_model=ImmeubleOut)
async def update_immeuble(
    immeuble_id: int,
    immeuble: ImmeubleUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    db_obj = immeuble_service.get_or_404(db, immeuble_id)
    _verifier_existence(db, proprietaire_service, immeuble.proprietaire_id)
    return immeuble_service.update(db, db_obj, immeuble, user_id=current_user.id, request=request)


@router.delete("/immeubles/{immeuble_id}")
async def delete_immeuble(
    immeuble_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    """Supprime l'immeuble avec ses lots et ses dépenses"""
    immeuble_service.delete(db, immeuble_id, user_id=current_user.id, request=request)
    return {"message": "Immeuble supprimé"}


@router.get("/immeubles/{immeuble_id}/depenses", response_model=List[DepenseOut])
async def list_depenses(
    immeuble_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    immeuble_service.get_or_404(db, immeuble_id)
    return db.query(DepenseImmeuble).filter(
        DepenseImmeuble.immeuble_id == immeuble_id
    ).order_by(DepenseImmeuble.date.desc()).all()


@router.post("/immeubles/{immeuble_id}/depenses", response_model=DepenseOut, status_code=201)
async def create_depense(
    immeuble_id: int,
    depense: DepenseCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    immeuble_service.get_or_404(db, immeuble_id)
    return depense_service.create(db, depense, user_id=current_user.id, request=request, immeuble_id=immeuble_id)


@router.delete("/depenses/{depense_id}")
async def delete_depense(
    depense_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    depense_service.delete(db, depense_id, user_id=current_user.id, request=request)
    return {"message": "Dépense supprimée"}


# ---------------------- LOTS ----------------------

@router.get("/lots", response_model=List[LotOut])
async def list_lots(
    immeuble_id: Optional[int] = None,
    statut: Optional[StatutLot] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return lot_service.get_multi(
        db, skip=skip, limit=limit,
        filters={"immeuble_id": immeuble_id, "statut": statut},
        order_by=Lot.numero
    )


@router.post("/lots", response_model=LotOut, status_code=201)
async def create_lot(
    lot: LotCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    _verifier_existence(db, immeuble_service, lot.immeuble_id)
    _verifier_existence(db, locataire_service, lot.locataire_id)

    occupation = {"statut": StatutLot.OCCUPE} if lot.locataire_id else {}
    return lot_service.create(db, lot, user_id=current_user.id, request=request, **occupation)


@router.get("/lots/{lot_id}", response_model=LotOut)
async def get_lot(
    lot_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return lot_service.get_or_404(db, lot_id)


@router.patch("/lots/{lot_id}", response_model=LotOut)
async def update_lot(
    lot_id: int,
    lot: LotUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Affecter un locataire rend le lot OCCUPE, le libérer le rend LIBRE"""
    db_lot = lot_service.get_or_404(db, lot_id)
    valeurs = lot.model_dump(exclude_unset=True)
    _verifier_existence(db, locataire_service, valeurs.get("locataire_id"))

    valeurs = _statut_occupation(valeurs, db_lot.statut)
    return lot_service.update(db, db_lot, valeurs, user_id=current_user.id, request=request)


@router.delete("/lots/{lot_id}")
async def delete_lot(
    lot_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    lot_service.delete(db, lot_id, user_id=current_user.id, request=request)
    return {"message": "Lot supprimé"}


# ---------------------- LOCATAIRES ----------------------

@router.get("/locataires", response_model=List[LocataireOut])
async def list_locataires(
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    query = db.query(Locataire)
    if search:
        motif = f"%{search}%"
        query = query.filter(or_(Locataire.nom.ilike(motif), Locataire.prenom.ilike(motif)))
    return query.order_by(Locataire.nom, Locataire.prenom).offset(skip).limit(limit).all()


@router.post("/locataires", response_model=LocataireOut, status_code=201)
async def create_locataire(
    locataire: LocataireCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return locataire_service.create(db, locataire, user_id=current_user.id, request=request)


@router.get("/locataires/{locataire_id}", response_model=LocataireOut)
async def get_locataire(
    locataire_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return locataire_service.get_or_404(db, locataire_id)


@router.patch("/locataires/{locataire_id}", response_model=LocataireOut)
async def update_locataire(
    locataire_id: int,
    locataire: LocataireUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    db_obj = locataire_service.get_or_404(db, locataire_id)
    return locataire_service.update(db, db_obj, locataire, user_id=current_user.id, request=request)


@router.delete("/locataires/{locataire_id}")
async def delete_locataire(
    locataire_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    locataire_service.delete(db, locataire_id, user_id=current_user.id, request=request)
    return {"message": "Locataire supprimé"}


# ---------------------- BAUX ----------------------

@router.get("/baux", response_model=List[BailOut])
async def list_baux(
    lot_id: Optional[int] = None,
    locataire_id: Optional[int] = None,
    statut: Optional[StatutBail] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return bail_service.get_multi(
        db, skip=skip, limit=limit,
        filters={"lot_id": lot_id, "locataire_id": locataire_id, "statut": statut},
        order_by=Bail.date_debut.desc()
    )


@router.post("/baux", response_model=BailOut, status_code=201)
async def create_bail(
    bail: BailCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    _verifier_existence(db, lot_service, bail.lot_id)
    _verifier_existence(db, locataire_service, bail.locataire_id)
    return bail_service.create(db, bail, user_id=current_user.id, request=request)


@router.get("/baux/{bail_id}", response_model=BailOut)
async def get_bail(
    bail_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return bail_service.get_or_404(db, bail_id)


@router.patch("/baux/{bail_id}", response_model=BailOut)
async def update_bail(
    bail_id: int,
    bail: BailUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    db_bail = bail_service.get_or_404(db, bail_id)
    return bail_service.update(db, db_bail, bail, user_id=current_user.id, request=request)


@router.delete("/baux/{bail_id}")
async def delete_bail(
    bail_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    bail_service.delete(db, bail_id, user_id=current_user.id, request=request)
    return {"message": "Bail supprimé"}


# ---------------------- ENCAISSEMENTS ----------------------

@router.get("/encaissements", response_model=List[EncaissementOut])
async def list_encaissements(
    lot_id: Optional[int] = None,
    mois: Optional[str] = Query(None, description="Mois au format YYYY-MM"),
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return encaissement_service.get_multi(
        db, skip=skip, limit=limit,
        filters={"lot_id": lot_id, "mois_concerne": mois},
        order_by=EncaissementLoyer.date_encaissement.desc()
    )


@router.post("/encaissements", response_model=EncaissementOut, status_code=201)
async def create_encaissement(
    encaissement: EncaissementCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Enregistre un encaissement; les alertes du mois disparaissent quand le lot est soldé"""
    _verifier_existence(db, lot_service, encaissement.lot_id)
    db_obj = encaissement_service.create(
        db, encaissement, user_id=current_user.id, request=request, created_by=current_user.id
    )

    if impayes_service.est_lot_solde(db, db_obj.lot_id, db_obj.mois_concerne):
        alerte_service.supprimer_alertes_resolues(db, db_obj.lot_id, db_obj.mois_concerne)
    return db_obj


@router.delete("/encaissements/{encaissement_id}")
async def delete_encaissement(
    encaissement_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    encaissement_service.delete(db, encaissement_id, user_id=current_user.id, request=request)
    return {"message": "Encaissement supprimé"}


# ---------------------- ALERTES ----------------------

@router.get("/alertes", response_model=List[AlerteOut])
async def list_alertes(
    non_lues: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return alerte_service.lister(db, non_lues=non_lues, skip=skip, limit=limit)


@router.patch("/alertes/{alerte_id}/lu", response_model=AlerteOut)
async def marquer_alerte_lue(
    alerte_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    alerte = db.query(Alerte).filter(Alerte.id == alerte_id).first()
    if alerte is None:
        raise NotFoundError("Alerte", alerte_id)
    alerte.lu = True
    db.commit()
    db.refresh(alerte)
    return alerte
