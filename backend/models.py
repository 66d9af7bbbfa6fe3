from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Enum, DateTime, Date, Text, Numeric, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import datetime
from decimal import Decimal

# Import centralisé des enums
from enums import (
    AppRole, ActionType, EntityType, StatutAffaire, StatutAudience, TypeAudience,
    TypeResultatAudience, TypeLot, StatutLot, StatutBail, ModePaiement,
    TypeAlerte, PrioriteAlerte, StatutRecouvrement, StatutArrierage, TypeDepenseAffaire,
    TypeActionRecouvrement
)


# ==================== UTILISATEURS ====================

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    nom = Column(String(100))
    prenom = Column(String(100))
    actif = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan", lazy="selectin")

    @property
    def role_names(self):
        return {r.role.value if isinstance(r.role, AppRole) else r.role for r in self.roles}


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(Enum(AppRole), nullable=False)

    user = relationship("User", back_populates="roles")

    __table_args__ = (
        UniqueConstraint('user_id', 'role', name='uq_user_role'),
    )


# ==================== CONTENTIEUX ====================

class Affaire(Base):
    __tablename__ = "affaires"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(50), unique=True, index=True, nullable=False)
    intitule = Column(String(500), nullable=False)
    juridiction = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    statut = Column(Enum(StatutAffaire), default=StatutAffaire.ACTIVE, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    audiences = relationship("Audience", back_populates="affaire", cascade="all, delete-orphan")
    honoraires = relationship("HonoraireAffaire", back_populates="affaire", cascade="all, delete-orphan")
    depenses = relationship("DepenseAffaire", back_populates="affaire", cascade="all, delete-orphan")


class Audience(Base):
    __tablename__ = "audiences"

    id = Column(Integer, primary_key=True, index=True)
    affaire_id = Column(Integer, ForeignKey("affaires.id"), nullable=False)
    date = Column(DateTime, nullable=False)
    heure = Column(String(5), nullable=True)  # "HH:MM"
    type = Column(Enum(TypeAudience), default=TypeAudience.MISE_EN_ETAT, nullable=False)
    juridiction = Column(String(255), nullable=True)
    chambre = Column(String(255), nullable=True)
    ville = Column(String(100), nullable=True)
    # Valeur en cache du statut dérivé, recalculée à chaque lecture
    statut = Column(Enum(StatutAudience), default=StatutAudience.A_VENIR, nullable=False)
    notes_preparation = Column(Text, nullable=True)
    est_preparee = Column(Boolean, default=False)

    # Rappel d'enrôlement
    rappel_enrolement = Column(Boolean, default=False)
    date_rappel_enrolement = Column(DateTime, nullable=True)
    enrolement_effectue = Column(Boolean, default=False)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    affaire = relationship("Affaire", back_populates="audiences")
    resultats = relationship(
        "ResultatAudience", back_populates="audience",
        cascade="all, delete-orphan", order_by="ResultatAudience.created_at"
    )

    __table_args__ = (
        Index('idx_audience_date', 'date'),
        Index('idx_audience_affaire', 'affaire_id'),
        Index('idx_audience_rappel', 'rappel_enrolement', 'enrolement_effectue'),
    )

    @property
    def resultat(self):
        return self.resultats[0] if self.resultats else None


class ResultatAudience(Base):
    __tablename__ = "resultats_audiences"

    id = Column(Integer, primary_key=True, index=True)
    audience_id = Column(Integer, ForeignKey("audiences.id", ondelete="CASCADE"), nullable=False)
    type = Column(Enum(TypeResultatAudience), nullable=False)
    nouvelle_date = Column(DateTime, nullable=True)  # En cas de renvoi
    motif_renvoi = Column(Text, nullable=True)
    motif_radiation = Column(Text, nullable=True)
    texte_delibere = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    audience = relationship("Audience", back_populates="resultats")


class HonoraireAffaire(Base):
    __tablename__ = "honoraires_contentieux"

    id = Column(Integer, primary_key=True, index=True)
    affaire_id = Column(Integer, ForeignKey("affaires.id", ondelete="CASCADE"), nullable=False)
    montant_facture = Column(Numeric(14, 2), nullable=False)
    montant_encaisse = Column(Numeric(14, 2), default=0, nullable=False)
    date_facturation = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    affaire = relationship("Affaire", back_populates="honoraires")

    __table_args__ = (
        Index('idx_honoraire_affaire', 'affaire_id'),
    )

    @property
    def montant_restant(self):
        return Decimal(self.montant_facture or 0) - Decimal(self.montant_encaisse or 0)


class DepenseAffaire(Base):
    __tablename__ = "depenses_affaires"

    id = Column(Integer, primary_key=True, index=True)
    affaire_id = Column(Integer, ForeignKey("affaires.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    type_depense = Column(Enum(TypeDepenseAffaire), default=TypeDepenseAffaire.AUTRES, nullable=False)
    nature = Column(String(255), nullable=False)
    montant = Column(Numeric(14, 2), nullable=False)
    description = Column(Text, nullable=True)
    justificatif = Column(String(500), nullable=True)  # Référence ou chemin de la pièce
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    affaire = relationship("Affaire", back_populates="depenses")

    __table_args__ = (
        Index('idx_depense_affaire', 'affaire_id'),
        Index('idx_depense_affaire_date', 'date'),
    )


# ==================== GESTION LOCATIVE ====================

class Proprietaire(Base):
    __tablename__ = "proprietaires"

    id = Column(Integer, primary_key=True, index=True)
    nom = Column(String(255), unique=True, nullable=False)
    telephone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    adresse = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    immeubles = relationship("Immeuble", back_populates="proprietaire")


class Immeuble(Base):
    __tablename__ = "immeubles"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(50), unique=True, index=True, nullable=False)
    nom = Column(String(255), unique=True, nullable=False)
    adresse = Column(String(500), nullable=False)
    proprietaire_id = Column(Integer, ForeignKey("proprietaires.id"), nullable=True)
    taux_commission = Column(Numeric(5, 2), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    proprietaire = relationship("Proprietaire", back_populates="immeubles")
    lots = relationship("Lot", back_populates="immeuble", cascade="all, delete-orphan")
    depenses = relationship("DepenseImmeuble", back_populates="immeuble", cascade="all, delete-orphan")


class Locataire(Base):
    __tablename__ = "locataires"

    id = Column(Integer, primary_key=True, index=True)
    nom = Column(String(255), nullable=False)
    prenom = Column(String(255), nullable=True)
    telephone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    date_naissance = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    lots = relationship("Lot", back_populates="locataire")
    baux = relationship("Bail", back_populates="locataire")

    __table_args__ = (
        Index('idx_locataire_nom', 'nom', 'prenom'),
    )

    @property
    def nom_complet(self):
        return f"{self.nom} {self.prenom}".strip() if self.prenom else self.nom


class Lot(Base):
    __tablename__ = "lots"

    id = Column(Integer, primary_key=True, index=True)
    immeuble_id = Column(Integer, ForeignKey("immeubles.id"), nullable=False)
    numero = Column(String(50), nullable=False)
    type = Column(Enum(TypeLot), default=TypeLot.AUTRE, nullable=False)
    etage = Column(Integer, nullable=True)
    loyer_mensuel_attendu = Column(Numeric(12, 2), nullable=True)
    statut = Column(Enum(StatutLot), default=StatutLot.LIBRE, nullable=False)
    locataire_id = Column(Integer, ForeignKey("locataires.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    immeuble = relationship("Immeuble", back_populates="lots")
    locataire = relationship("Locataire", back_populates="lots")
    baux = relationship("Bail", back_populates="lot", cascade="all, delete-orphan")
    encaissements = relationship("EncaissementLoyer", back_populates="lot", cascade="all, delete-orphan")
    arrierages = relationship("Arrierage", back_populates="lot", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint('immeuble_id', 'numero', name='uq_lot_immeuble_numero'),
        Index('idx_lot_statut', 'statut'),
    )


class Bail(Base):
    __tablename__ = "baux"

    id = Column(Integer, primary_key=True, index=True)
    locataire_id = Column(Integer, ForeignKey("locataires.id"), nullable=False)
    lot_id = Column(Integer, ForeignKey("lots.id"), nullable=False)
    montant_loyer = Column(Numeric(12, 2), nullable=False)
    jour_echeance = Column(Integer, default=5, nullable=False)
    date_debut = Column(Date, nullable=False)
    date_fin = Column(Date, nullable=True)
    statut = Column(Enum(StatutBail), default=StatutBail.ACTIF, nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    locataire = relationship("Locataire", back_populates="baux")
    lot = relationship("Lot", back_populates="baux")

    __table_args__ = (
        Index('idx_bail_lot', 'lot_id'),
        Index('idx_bail_statut', 'statut'),
    )


class EncaissementLoyer(Base):
    __tablename__ = "encaissements_loyers"

    id = Column(Integer, primary_key=True, index=True)
    lot_id = Column(Integer, ForeignKey("lots.id"), nullable=False)
    mois_concerne = Column(String(7), nullable=False)  # "YYYY-MM"
    montant_encaisse = Column(Numeric(12, 2), nullable=False)
    date_encaissement = Column(Date, nullable=False)
    mode_paiement = Column(Enum(ModePaiement), default=ModePaiement.ESPECES, nullable=False)
    observation = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    lot = relationship("Lot", back_populates="encaissements")

    __table_args__ = (
        Index('idx_encaissement_lot_mois', 'lot_id', 'mois_concerne'),
    )


class Arrierage(Base):
    """Arriéré de loyers saisi manuellement sur une période d'un lot"""
    __tablename__ = "arrierages_loyers"

    id = Column(Integer, primary_key=True, index=True)
    lot_id = Column(Integer, ForeignKey("lots.id", ondelete="CASCADE"), nullable=False)
    periode_debut = Column(Date, nullable=False)
    periode_fin = Column(Date, nullable=False)
    montant_du = Column(Numeric(14, 2), nullable=False)
    montant_paye = Column(Numeric(14, 2), default=0, nullable=False)
    montant_restant = Column(Numeric(14, 2), nullable=False)
    statut = Column(Enum(StatutArrierage), default=StatutArrierage.EN_COURS, nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    lot = relationship("Lot", back_populates="arrierages")
    paiements_partiels = relationship(
        "PaiementPartielArrierage", back_populates="arrierage",
        cascade="all, delete-orphan", order_by="PaiementPartielArrierage.created_at.desc()"
    )

    __table_args__ = (
        Index('idx_arrierage_lot_periode', 'lot_id', 'periode_debut', 'periode_fin'),
        Index('idx_arrierage_statut', 'statut'),
    )

    @property
    def lot_numero(self):
        return self.lot.numero

    @property
    def immeuble_nom(self):
        return self.lot.immeuble.nom

    @property
    def locataire_nom(self):
        return self.lot.locataire.nom_complet if self.lot.locataire else None


class PaiementPartielArrierage(Base):
    __tablename__ = "paiements_partiels_arrierages"

    id = Column(Integer, primary_key=True, index=True)
    arrierage_id = Column(Integer, ForeignKey("arrierages_loyers.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    montant = Column(Numeric(14, 2), nullable=False)
    mode = Column(Enum(ModePaiement), default=ModePaiement.ESPECES, nullable=False)
    reference = Column(String(100), nullable=True)
    commentaire = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    arrierage = relationship("Arrierage", back_populates="paiements_partiels")


class DepenseImmeuble(Base):
    __tablename__ = "depenses_immeubles"

    id = Column(Integer, primary_key=True, index=True)
    immeuble_id = Column(Integer, ForeignKey("immeubles.id"), nullable=False)
    date = Column(Date, nullable=False)
    libelle = Column(String(255), nullable=False)
    montant = Column(Numeric(12, 2), nullable=False)
    categorie = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    immeuble = relationship("Immeuble", back_populates="depenses")


class Alerte(Base):
    __tablename__ = "alertes"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(TypeAlerte), nullable=False)
    titre = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    lien = Column(String(255), nullable=True)
    mois = Column(String(7), nullable=True)
    priorite = Column(Enum(PrioriteAlerte), default=PrioriteAlerte.BASSE, nullable=False)
    lu = Column(Boolean, default=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    __table_args__ = (
        Index('idx_alerte_type_lien_mois', 'type', 'lien', 'mois'),
    )


# ==================== RECOUVREMENT ====================

class DossierRecouvrement(Base):
    __tablename__ = "dossiers_recouvrement"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(50), unique=True, index=True, nullable=False)

    creancier_nom = Column(String(255), nullable=False)
    creancier_telephone = Column(String(50), nullable=True)
    creancier_email = Column(String(255), nullable=True)

    debiteur_nom = Column(String(255), nullable=False)
    debiteur_telephone = Column(String(50), nullable=True)
    debiteur_email = Column(String(255), nullable=True)
    debiteur_adresse = Column(String(500), nullable=True)

    montant_principal = Column(Numeric(14, 2), nullable=False)
    penalites_interets = Column(Numeric(14, 2), default=0, nullable=False)
    total_a_recouvrer = Column(Numeric(14, 2), nullable=False)

    statut = Column(Enum(StatutRecouvrement), default=StatutRecouvrement.EN_COURS, nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    paiements = relationship(
        "PaiementRecouvrement", back_populates="dossier",
        cascade="all, delete-orphan", order_by="PaiementRecouvrement.date.desc()"
    )
    actions = relationship(
        "ActionRecouvrement", back_populates="dossier",
        cascade="all, delete-orphan", order_by="ActionRecouvrement.date.desc()"
    )

    @property
    def total_paiements(self):
        return sum((p.montant for p in self.paiements), Decimal("0"))

    @property
    def solde_restant(self):
        return Decimal(self.total_a_recouvrer or 0) - self.total_paiements


class PaiementRecouvrement(Base):
    __tablename__ = "paiements_recouvrement"

    id = Column(Integer, primary_key=True, index=True)
    dossier_id = Column(Integer, ForeignKey("dossiers_recouvrement.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    montant = Column(Numeric(14, 2), nullable=False)
    mode = Column(Enum(ModePaiement), default=ModePaiement.VIREMENT, nullable=False)
    reference = Column(String(100), nullable=True)
    commentaire = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    dossier = relationship("DossierRecouvrement", back_populates="paiements")


class ActionRecouvrement(Base):
    __tablename__ = "actions_recouvrement"

    id = Column(Integer, primary_key=True, index=True)
    dossier_id = Column(Integer, ForeignKey("dossiers_recouvrement.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    type_action = Column(Enum(TypeActionRecouvrement), nullable=False)
    resume = Column(Text, nullable=False)
    prochaine_etape = Column(Text, nullable=True)
    echeance_prochaine_etape = Column(Date, nullable=True)
    piece_jointe = Column(String(500), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    dossier = relationship("DossierRecouvrement", back_populates="actions")

    __table_args__ = (
        Index('idx_action_dossier_date', 'dossier_id', 'date'),
    )

    @property
    def dossier_reference(self):
        return self.dossier.reference


# ==================== AUDIT ====================

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)  # Peut être null pour les actions anonymes
    action = Column(Enum(ActionType))  # Type d'action effectuée
    entity_type = Column(Enum(EntityType))  # Type d'entité concernée
    entity_id = Column(Integer, nullable=True)  # ID de l'entité concernée
    description = Column(String(500))  # Description de l'action
    details = Column(Text, nullable=True)  # Détails JSON de l'action (données avant/après)
    ip_address = Column(String(50), nullable=True)  # Adresse IP
    user_agent = Column(String(500), nullable=True)  # Navigateur/device
    endpoint = Column(String(200), nullable=True)  # Endpoint API appelé
    method = Column(String(10), nullable=True)  # GET, POST, PUT, DELETE
    status_code = Column(Integer, nullable=True)  # Code de réponse HTTP
    process_time_ms = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    user = relationship("User")
