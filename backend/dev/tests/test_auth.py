"""
LexImmo - Authentification, rôles et format des erreurs
Run: pytest backend/dev/tests/test_auth.py -v
"""
from models import AuditLog
from enums import ActionType

from conftest import PASSWORD


class TestLogin:
    """Connexion par formulaire OAuth2 (username = email)"""

    def test_login_ok(self, client, users, db):
        response = client.post("/api/auth/login", data={"username": "collab@leximmo.sn", "password": PASSWORD})
        assert response.status_code == 200
        token = response.json()["access_token"]
        assert response.json()["token_type"] == "bearer"

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "collab@leximmo.sn"
        assert me.json()["roles"] == ["collaborateur"]

        assert db.query(AuditLog).filter(AuditLog.action == ActionType.LOGIN).count() == 1

    def test_mauvais_mot_de_passe(self, client, users):
        response = client.post("/api/auth/login", data={"username": "collab@leximmo.sn", "password": "faux"})
        assert response.status_code == 401

    def test_utilisateur_inconnu(self, client, users):
        response = client.post("/api/auth/login", data={"username": "inconnu@leximmo.sn", "password": PASSWORD})
        assert response.status_code == 401

    def test_compte_desactive(self, client, users, db):
        users["compta"].actif = False
        db.commit()
        response = client.post("/api/auth/login", data={"username": "compta@leximmo.sn", "password": PASSWORD})
        assert response.status_code == 403


class TestAcces:

    def test_sans_jeton(self, client):
        assert client.get("/api/contentieux/audiences").status_code == 401

    def test_jeton_invalide(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer pas-un-jwt"})
        assert response.status_code == 401

    def test_suppression_reservee_admin(self, client, collab_headers, admin_headers):
        affaire = client.post("/api/contentieux/affaires", json={"intitule": "Dossier Sow"},
                              headers=collab_headers).json()
        url = f"/api/contentieux/affaires/{affaire['id']}"
        refus = client.delete(url, headers=collab_headers)
        assert refus.status_code == 403
        assert refus.json()["error_code"] == "ACCESS_DENIED"
        assert client.delete(url, headers=admin_headers).status_code == 200
        assert client.get(url, headers=collab_headers).status_code == 404

    def test_sante(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestFormatErreurs:
    """Les erreurs de validation renvoient 400 et un tableau de messages par champ"""

    def test_champs_requis_et_types(self, client, collab_headers):
        response = client.post("/api/immobilier/baux", json={"lot_id": "abc", "montant_loyer": -5},
                               headers=collab_headers)
        assert response.status_code == 400
        data = response.json()
        assert data["type"] == "validation_error"
        assert data["errors"]["locataire_id"] == ["Ce champ est requis"]
        assert data["errors"]["lot_id"] == ["Doit être un nombre entier"]
        assert data["errors"]["montant_loyer"] == ["Doit être supérieur ou égal à 0"]
        assert data["errors"]["date_debut"] == ["Ce champ est requis"]

    def test_dates_de_bail_incoherentes(self, client, collab_headers):
        response = client.post("/api/immobilier/baux", json={
            "locataire_id": 1, "lot_id": 1, "montant_loyer": 1000,
            "date_debut": "2024-05-01", "date_fin": "2024-01-01"
        }, headers=collab_headers)
        assert response.status_code == 400
        assert "body" in response.json()["errors"]

    def test_enum_invalide(self, client, collab_headers):
        response = client.get("/api/contentieux/audiences", params={"statut": "INCONNU"},
                              headers=collab_headers)
        assert response.status_code == 400
        assert "statut" in response.json()["errors"]

    def test_ressource_absente(self, client, collab_headers):
        response = client.get("/api/immobilier/lots/4242", headers=collab_headers)
        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"

    def test_doublon_de_numero_de_lot(self, client, collab_headers):
        immeuble = client.post("/api/immobilier/immeubles", json={"nom": "Sandaga", "adresse": "Dakar"},
                               headers=collab_headers).json()
        lot = {"immeuble_id": immeuble["id"], "numero": "B01"}
        assert client.post("/api/immobilier/lots", json=lot, headers=collab_headers).status_code == 201
        response = client.post("/api/immobilier/lots", json=lot, headers=collab_headers)
        assert response.status_code == 409
