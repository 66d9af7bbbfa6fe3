from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator, ValidationInfo
from typing import Optional, List
from datetime import datetime, date
import datetime as dt
from decimal import Decimal

# Import centralisé des enums
from enums import (
    AppRole, StatutAffaire, StatutAudience, TypeAudience, TypeResultatAudience, TypeDepenseAffaire,
    TypeLot, StatutLot, StatutBail, ModePaiement, StatutRecouvrement, StatutArrierage,
    TypeAlerte, PrioriteAlerte, TypeActionRecouvrement
)
from validators import CommonValidators, FinancialValidators
from constants import MIN_FLOOR, MAX_FLOOR


# ==================== AUTHENTIFICATION ====================

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserOut(BaseModel):
    id: int
    email: EmailStr
    nom: Optional[str] = None
    prenom: Optional[str] = None
    actif: bool = True
    roles: List[str] = []

    model_config = {"from_attributes": True}

    @field_validator('roles', mode='before')
    @classmethod
    def flatten_roles(cls, v):
        # Les rôles ORM sont des UserRole, on expose uniquement leur nom
        return [r.role.value if hasattr(r, 'role') else str(r) for r in (v or [])]


class UserDetailOut(UserOut):
    created_at: Optional[datetime] = None


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    nom: Optional[str] = Field(None, max_length=100)
    prenom: Optional[str] = Field(None, max_length=100)
    roles: List[AppRole] = []

    model_config = {"extra": "forbid"}

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return CommonValidators.validate_password(v)


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    nom: Optional[str] = Field(None, max_length=100)
    prenom: Optional[str] = Field(None, max_length=100)
    actif: Optional[bool] = None

    model_config = {"extra": "forbid"}

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if v else v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if v is None:
            raise ValueError('Le mot de passe ne peut pas être vide')
        return CommonValidators.validate_password(v)


class RoleAssign(BaseModel):
    role: AppRole


# ==================== AFFAIRES ====================

class AffaireBase(BaseModel):
    intitule: str = Field(..., max_length=500, description="Intitulé de l'affaire")
    juridiction: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    statut: StatutAffaire = Field(default=StatutAffaire.ACTIVE)

    @field_validator('intitule')
    @classmethod
    def validate_intitule(cls, v):
        return CommonValidators.validate_name(v, "intitulé")


class AffaireCreate(AffaireBase):
    reference: Optional[str] = Field(None, max_length=50, description="Référence (générée si absente)")


class AffaireUpdate(BaseModel):
    intitule: Optional[str] = Field(None, max_length=500)
    juridiction: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    statut: Optional[StatutAffaire] = None


class AffaireOut(AffaireBase):
    id: int
    reference: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AffaireResume(BaseModel):
    id: int
    reference: str
    intitule: str

    model_config = {"from_attributes": True}


# ==================== AUDIENCES ====================

class AudienceBase(BaseModel):
    date: datetime = Field(..., description="Date et heure de l'audience")
    heure: Optional[str] = Field(None, description="Heure au format HH:MM")
    type: TypeAudience = Field(default=TypeAudience.MISE_EN_ETAT)
    juridiction: Optional[str] = Field(None, max_length=255)
    chambre: Optional[str] = Field(None, max_length=255)
    ville: Optional[str] = Field(None, max_length=100)
    notes_preparation: Optional[str] = None
    est_preparee: bool = False
    rappel_enrolement: bool = False

    @field_validator('heure')
    @classmethod
    def validate_heure(cls, v):
        return CommonValidators.validate_heure(v)


class AudienceCreate(AudienceBase):
    affaire_id: int = Field(..., gt=0)


class AudienceUpdate(BaseModel):
    date: Optional[datetime] = None
    heure: Optional[str] = None
    type: Optional[TypeAudience] = None
    juridiction: Optional[str] = Field(None, max_length=255)
    chambre: Optional[str] = Field(None, max_length=255)
    ville: Optional[str] = Field(None, max_length=100)
    notes_preparation: Optional[str] = None
    est_preparee: Optional[bool] = None
    rappel_enrolement: Optional[bool] = None

    @field_validator('heure')
    @classmethod
    def validate_heure(cls, v):
        return CommonValidators.validate_heure(v)


class ResultatAudienceCreate(BaseModel):
    """Résultat d'une audience. Les champs inconnus sont refusés."""
    type: TypeResultatAudience
    nouvelle_date: Optional[datetime] = Field(None, validate_default=True)
    motif_renvoi: Optional[str] = None
    motif_radiation: Optional[str] = None
    texte_delibere: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator('nouvelle_date')
    @classmethod
    def check_nouvelle_date(cls, v, info: ValidationInfo):
        if info.data.get('type') == TypeResultatAudience.RENVOI and v is None:
            raise ValueError('La nouvelle date est obligatoire pour un renvoi')
        return v


class ResultatAudienceUpdate(BaseModel):
    type: Optional[TypeResultatAudience] = None
    nouvelle_date: Optional[datetime] = None
    motif_renvoi: Optional[str] = None
    motif_radiation: Optional[str] = None
    texte_delibere: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator('type')
    @classmethod
    def check_type(cls, v):
        if v is None:
            raise ValueError("Le type de résultat ne peut pas être vide")
        return v


class ResultatAudienceOut(BaseModel):
    id: int
    audience_id: int
    type: TypeResultatAudience
    nouvelle_date: Optional[datetime] = None
    motif_renvoi: Optional[str] = None
    motif_radiation: Optional[str] = None
    texte_delibere: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AudienceOut(AudienceBase):
    id: int
    affaire_id: int
    affaire: Optional[AffaireResume] = None
    statut: StatutAudience
    date_rappel_enrolement: Optional[datetime] = None
    enrolement_effectue: bool = False
    resultat: Optional[ResultatAudienceOut] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator('heure', mode='before')
    @classmethod
    def validate_heure(cls, v):
        # Pas de revalidation en sortie
        return v


# ==================== HONORAIRES ET DÉPENSES D'AFFAIRES ====================

class HonoraireCreate(BaseModel):
    affaire_id: int = Field(..., gt=0)
    montant_facture: Decimal = Field(..., gt=0)
    montant_encaisse: Decimal = Field(default=Decimal("0"), ge=0)
    date_facturation: date
    notes: Optional[str] = None

    @field_validator('montant_facture', 'montant_encaisse', mode='before')
    @classmethod
    def validate_montants(cls, v):
        return FinancialValidators.validate_amount(v)

    @model_validator(mode='after')
    def check_encaissement(self):
        if self.montant_encaisse > self.montant_facture:
            raise ValueError('Le montant encaissé ne peut pas dépasser le montant facturé')
        return self


class HonoraireUpdate(BaseModel):
    montant_facture: Optional[Decimal] = Field(None, gt=0)
    montant_encaisse: Optional[Decimal] = Field(None, ge=0)
    date_facturation: Optional[date] = None
    notes: Optional[str] = None

    @field_validator('montant_facture', 'montant_encaisse', mode='before')
    @classmethod
    def validate_montants(cls, v):
        if v is None:
            raise ValueError('Le montant ne peut pas être vide')
        return FinancialValidators.validate_amount(v)


class HonoraireOut(BaseModel):
    id: int
    affaire_id: int
    affaire: AffaireResume
    montant_facture: float
    montant_encaisse: float
    montant_restant: float
    date_facturation: date
    notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class DepenseAffaireCreate(BaseModel):
    affaire_id: int = Field(..., gt=0)
    date: date
    type_depense: TypeDepenseAffaire = Field(default=TypeDepenseAffaire.AUTRES)
    nature: str = Field(..., max_length=255)
    montant: Decimal = Field(..., gt=0)
    description: Optional[str] = None
    justificatif: Optional[str] = Field(None, max_length=500)

    @field_validator('nature')
    @classmethod
    def validate_nature(cls, v):
        return CommonValidators.validate_name(v, "nature")

    @field_validator('montant', mode='before')
    @classmethod
    def validate_montant(cls, v):
        return FinancialValidators.validate_amount(v)


class DepenseAffaireUpdate(BaseModel):
    date: Optional[dt.date] = None
    type_depense: Optional[TypeDepenseAffaire] = None
    nature: Optional[str] = Field(None, max_length=255)
    montant: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = None
    justificatif: Optional[str] = Field(None, max_length=500)

    @field_validator('date', 'type_depense', 'nature')
    @classmethod
    def non_nul(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f'Le champ {info.field_name} ne peut pas être vide')
        return v

    @field_validator('montant', mode='before')
    @classmethod
    def validate_montant(cls, v):
        if v is None:
            raise ValueError('Le montant ne peut pas être vide')
        return FinancialValidators.validate_amount(v)


class DepenseAffaireOut(BaseModel):
    id: int
    affaire_id: int
    affaire: AffaireResume
    date: date
    type_depense: TypeDepenseAffaire
    nature: str
    montant: float
    description: Optional[str] = None
    justificatif: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AudienceStatistiques(BaseModel):
    total: int
    aVenir: int
    nonRenseignees: int
    tenues: int


class StatutsRafraichis(BaseModel):
    total: int
    misesAJour: int


# ==================== GESTION LOCATIVE ====================

class ProprietaireBase(BaseModel):
    nom: str = Field(..., max_length=255)
    telephone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    adresse: Optional[str] = Field(None, max_length=500)

    @field_validator('nom')
    @classmethod
    def validate_nom(cls, v):
        return CommonValidators.validate_name(v)

    @field_validator('telephone')
    @classmethod
    def validate_telephone(cls, v):
        return CommonValidators.validate_telephone(v)


class ProprietaireCreate(ProprietaireBase):
    pass


class ProprietaireUpdate(BaseModel):
    nom: Optional[str] = Field(None, max_length=255)
    telephone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    adresse: Optional[str] = Field(None, max_length=500)

    @field_validator('telephone')
    @classmethod
    def validate_telephone(cls, v):
        return CommonValidators.validate_telephone(v)


class ProprietaireOut(BaseModel):
    id: int
    nom: str
    telephone: Optional[str] = None
    email: Optional[str] = None
    adresse: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ImmeubleBase(BaseModel):
    nom: str = Field(..., max_length=255, description="Nom de l'immeuble")
    adresse: str = Field(..., max_length=500)
    proprietaire_id: Optional[int] = None
    taux_commission: Optional[Decimal] = Field(None, ge=0, le=100)
    notes: Optional[str] = None

    @field_validator('nom', 'adresse')
    @classmethod
    def validate_non_vide(cls, v):
        return CommonValidators.validate_name(v)


class ImmeubleCreate(ImmeubleBase):
    reference: Optional[str] = Field(None, max_length=50)


class ImmeubleUpdate(BaseModel):
    nom: Optional[str] = Field(None, max_length=255)
    adresse: Optional[str] = Field(None, max_length=500)
    proprietaire_id: Optional[int] = None
    taux_commission: Optional[Decimal] = Field(None, ge=0, le=100)
    notes: Optional[str] = None


class ImmeubleOut(BaseModel):
    id: int
    reference: str
    nom: str
    adresse: str
    proprietaire_id: Optional[int] = None
    taux_commission: Optional[float] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class LocataireBase(BaseModel):
    nom: str = Field(..., max_length=255)
    prenom: Optional[str] = Field(None, max_length=255)
    telephone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    date_naissance: Optional[date] = None

    @field_validator('nom')
    @classmethod
    def validate_nom(cls, v):
        return CommonValidators.validate_name(v)

    @field_validator('telephone')
    @classmethod
    def validate_telephone(cls, v):
        return CommonValidators.validate_telephone(v)


class LocataireCreate(LocataireBase):
    pass


class LocataireUpdate(BaseModel):
    nom: Optional[str] = Field(None, max_length=255)
    prenom: Optional[str] = Field(None, max_length=255)
    telephone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    date_naissance: Optional[date] = None


class LocataireOut(BaseModel):
    id: int
    nom: str
    prenom: Optional[str] = None
    telephone: Optional[str] = None
    email: Optional[str] = None
    date_naissance: Optional[date] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class LotBase(BaseModel):
    numero: str = Field(..., max_length=50)
    type: TypeLot = Field(default=TypeLot.AUTRE)
    etage: Optional[int] = Field(None, ge=MIN_FLOOR, le=MAX_FLOOR)
    loyer_mensuel_attendu: Optional[Decimal] = Field(None, ge=0)
    statut: StatutLot = Field(default=StatutLot.LIBRE)
    locataire_id: Optional[int] = None


class LotCreate(LotBase):
    immeuble_id: int = Field(..., gt=0)


class LotUpdate(BaseModel):
    numero: Optional[str] = Field(None, max_length=50)
    type: Optional[TypeLot] = None
    etage: Optional[int] = Field(None, ge=MIN_FLOOR, le=MAX_FLOOR)
    loyer_mensuel_attendu: Optional[Decimal] = Field(None, ge=0)
    statut: Optional[StatutLot] = None
    locataire_id: Optional[int] = None


class LotOut(BaseModel):
    id: int
    immeuble_id: int
    numero: str
    type: TypeLot
    etage: Optional[int] = None
    loyer_mensuel_attendu: Optional[float] = None
    statut: StatutLot
    locataire_id: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BailBase(BaseModel):
    locataire_id: int = Field(..., gt=0)
    lot_id: int = Field(..., gt=0)
    montant_loyer: Decimal = Field(..., ge=0)
    jour_echeance: int = Field(default=5, ge=1, le=28)
    date_debut: date
    date_fin: Optional[date] = None
    statut: StatutBail = Field(default=StatutBail.ACTIF)

    @model_validator(mode='after')
    def check_dates(self):
        if self.date_fin and self.date_fin < self.date_debut:
            raise ValueError('La date de fin doit être postérieure à la date de début')
        return self


class BailCreate(BailBase):
    pass


class BailUpdate(BaseModel):
    montant_loyer: Optional[Decimal] = Field(None, ge=0)
    jour_echeance: Optional[int] = Field(None, ge=1, le=28)
    date_debut: Optional[date] = None
    date_fin: Optional[date] = None
    statut: Optional[StatutBail] = None


class BailOut(BaseModel):
    id: int
    locataire_id: int
    lot_id: int
    montant_loyer: float
    jour_echeance: int
    date_debut: date
    date_fin: Optional[date] = None
    statut: StatutBail
    created_at: datetime

    model_config = {"from_attributes": True}


class EncaissementCreate(BaseModel):
    """Encaissement d'un loyer. Les champs inconnus sont refusés."""
    lot_id: int = Field(..., gt=0)
    mois_concerne: str = Field(..., description="Mois au format YYYY-MM")
    montant_encaisse: Decimal = Field(..., gt=0)
    date_encaissement: date
    mode_paiement: ModePaiement = Field(default=ModePaiement.ESPECES)
    observation: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator('montant_encaisse', mode='before')
    @classmethod
    def validate_montant(cls, v):
        return FinancialValidators.validate_amount(v, "montant encaissé")

    @field_validator('mois_concerne')
    @classmethod
    def validate_mois(cls, v):
        return CommonValidators.validate_mois(v)


class EncaissementOut(BaseModel):
    id: int
    lot_id: int
    mois_concerne: str
    montant_encaisse: float
    date_encaissement: date
    mode_paiement: ModePaiement
    observation: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ArrierageCreate(BaseModel):
    """Arriéré de loyers antérieur à la gestion du cabinet"""
    lot_id: int = Field(..., gt=0)
    periode_debut: date
    periode_fin: date
    montant_du: Decimal = Field(..., gt=0)
    description: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator('montant_du', mode='before')
    @classmethod
    def validate_montant(cls, v):
        return FinancialValidators.validate_amount(v, "montant dû")

    @model_validator(mode='after')
    def check_periode(self):
        if self.periode_debut >= self.periode_fin:
            raise ValueError('La date de début doit être antérieure à la date de fin')
        return self


class ArrierageUpdate(BaseModel):
    periode_debut: Optional[date] = None
    periode_fin: Optional[date] = None
    montant_du: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator('periode_debut', 'periode_fin')
    @classmethod
    def non_nul(cls, v):
        if v is None:
            raise ValueError('La date de période ne peut pas être vide')
        return v

    @field_validator('montant_du', mode='before')
    @classmethod
    def validate_montant(cls, v):
        if v is None:
            raise ValueError('Le montant dû ne peut pas être vide')
        return FinancialValidators.validate_amount(v, "montant dû")


class PaiementPartielCreate(BaseModel):
    date: date
    montant: Decimal = Field(..., gt=0)
    mode: ModePaiement = Field(default=ModePaiement.ESPECES)
    reference: Optional[str] = Field(None, max_length=100)
    commentaire: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator('montant', mode='before')
    @classmethod
    def validate_montant(cls, v):
        return FinancialValidators.validate_amount(v)


class PaiementPartielOut(BaseModel):
    id: int
    arrierage_id: int
    date: date
    montant: float
    mode: ModePaiement
    reference: Optional[str] = None
    commentaire: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ArrierageOut(BaseModel):
    id: int
    lot_id: int
    lot_numero: str
    immeuble_nom: str
    locataire_nom: Optional[str] = None
    periode_debut: date
    periode_fin: date
    montant_du: float
    montant_paye: float
    montant_restant: float
    statut: StatutArrierage
    description: Optional[str] = None
    paiements_partiels: List[PaiementPartielOut] = []
    created_at: datetime

    model_config = {"from_attributes": True}


class DepenseCreate(BaseModel):
    date: date
    libelle: str = Field(..., max_length=255)
    montant: Decimal = Field(..., gt=0)
    categorie: Optional[str] = Field(None, max_length=100)

    @field_validator('libelle')
    @classmethod
    def validate_libelle(cls, v):
        return CommonValidators.validate_name(v, "libellé")


class DepenseOut(BaseModel):
    id: int
    immeuble_id: int
    date: date
    libelle: str
    montant: float
    categorie: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AlerteOut(BaseModel):
    id: int
    type: TypeAlerte
    titre: str
    description: Optional[str] = None
    lien: Optional[str] = None
    mois: Optional[str] = None
    priorite: PrioriteAlerte
    lu: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


# ==================== RECOUVREMENT ====================

class DossierRecouvrementBase(BaseModel):
    creancier_nom: str = Field(..., max_length=255)
    creancier_telephone: Optional[str] = Field(None, max_length=50)
    creancier_email: Optional[EmailStr] = None
    debiteur_nom: str = Field(..., max_length=255)
    debiteur_telephone: Optional[str] = Field(None, max_length=50)
    debiteur_email: Optional[EmailStr] = None
    debiteur_adresse: Optional[str] = Field(None, max_length=500)
    montant_principal: Decimal = Field(..., ge=0)
    penalites_interets: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None

    @field_validator('creancier_nom', 'debiteur_nom')
    @classmethod
    def validate_noms(cls, v):
        return CommonValidators.validate_name(v)

    @field_validator('montant_principal', 'penalites_interets')
    @classmethod
    def validate_montants(cls, v):
        return FinancialValidators.validate_amount(v)


class DossierRecouvrementCreate(DossierRecouvrementBase):
    reference: Optional[str] = Field(None, max_length=50)


class DossierRecouvrementUpdate(BaseModel):
    creancier_nom: Optional[str] = Field(None, max_length=255)
    creancier_telephone: Optional[str] = Field(None, max_length=50)
    creancier_email: Optional[EmailStr] = None
    debiteur_nom: Optional[str] = Field(None, max_length=255)
    debiteur_telephone: Optional[str] = Field(None, max_length=50)
    debiteur_email: Optional[EmailStr] = None
    debiteur_adresse: Optional[str] = Field(None, max_length=500)
    montant_principal: Optional[Decimal] = Field(None, ge=0)
    penalites_interets: Optional[Decimal] = Field(None, ge=0)
    statut: Optional[StatutRecouvrement] = None
    notes: Optional[str] = None


class PaiementCreate(BaseModel):
    """Paiement sur un dossier de recouvrement. Les champs inconnus sont refusés."""
    date: date
    montant: Decimal = Field(..., gt=0)
    mode: ModePaiement = Field(default=ModePaiement.VIREMENT)
    reference: Optional[str] = Field(None, max_length=100)
    commentaire: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator('montant', mode='before')
    @classmethod
    def validate_montant(cls, v):
        # Arrondi au centime avant le contrôle > 0
        return FinancialValidators.validate_amount(v)


class PaiementOut(BaseModel):
    id: int
    dossier_id: int
    date: date
    montant: float
    mode: ModePaiement
    reference: Optional[str] = None
    commentaire: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ActionCreate(BaseModel):
    """Action de recouvrement (relance, mise en demeure, procédure...)"""
    date: date
    type_action: TypeActionRecouvrement
    resume: str
    prochaine_etape: Optional[str] = None
    echeance_prochaine_etape: Optional[date] = None
    piece_jointe: Optional[str] = Field(None, max_length=500)

    model_config = {"extra": "forbid"}

    @field_validator('resume')
    @classmethod
    def validate_resume(cls, v):
        return CommonValidators.validate_name(v, "résumé")

    @model_validator(mode='after')
    def check_echeance(self):
        if self.echeance_prochaine_etape and self.echeance_prochaine_etape < self.date:
            raise ValueError("L'échéance ne peut pas précéder la date de l'action")
        return self


class ActionUpdate(BaseModel):
    date: Optional[dt.date] = None
    type_action: Optional[TypeActionRecouvrement] = None
    resume: Optional[str] = None
    prochaine_etape: Optional[str] = None
    echeance_prochaine_etape: Optional[dt.date] = None
    piece_jointe: Optional[str] = Field(None, max_length=500)

    model_config = {"extra": "forbid"}

    @field_validator('date', 'type_action')
    @classmethod
    def non_nul(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f'Le champ {info.field_name} ne peut pas être vide')
        return v

    @field_validator('resume')
    @classmethod
    def validate_resume(cls, v):
        return CommonValidators.validate_name(v, "résumé")


class ActionOut(BaseModel):
    id: int
    dossier_id: int
    dossier_reference: str
    date: date
    type_action: TypeActionRecouvrement
    resume: str
    prochaine_etape: Optional[str] = None
    echeance_prochaine_etape: Optional[date] = None
    piece_jointe: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class DossierRecouvrementOut(BaseModel):
    id: int
    reference: str
    creancier_nom: str
    creancier_telephone: Optional[str] = None
    creancier_email: Optional[str] = None
    debiteur_nom: str
    debiteur_telephone: Optional[str] = None
    debiteur_email: Optional[str] = None
    debiteur_adresse: Optional[str] = None
    montant_principal: float
    penalites_interets: float
    total_a_recouvrer: float
    total_paiements: float
    solde_restant: float
    statut: StatutRecouvrement
    notes: Optional[str] = None
    paiements: List[PaiementOut] = []
    created_at: datetime

    model_config = {"from_attributes": True}
