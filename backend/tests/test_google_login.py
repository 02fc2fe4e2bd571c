"""Tests for Google sign-in."""

import pytest
from unittest.mock import patch
from jose import jwt
from app.core.auth import ALGORITHM
from app.core.config import settings
from app.core.federated import (
    FederatedIdentity,
    FederatedIdentityError,
    GoogleIdentityVerifier,
)
from app.models.user import User
from app.services import accounts


@pytest.mark.unit
class TestGoogleLoginEndpoint:
    def test_missing_token(self, client):
        response = client.post("/api/auth/google-login", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Token is required"

    def test_rejected_assertion(self, client):
        response = client.post("/api/auth/google-login", json={"token": "forged"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid Google token"

    def test_first_login_creates_user(self, client, db_session, identity_verifier):
        identity_verifier.identities["good"] = FederatedIdentity(
            subject="g-123", email="gina@example.com", name="Gina Lopez"
        )

        response = client.post("/api/auth/google-login", json={"idToken": "good"})

        assert response.status_code == 200
        data = response.json()
        user = db_session.query(User).filter(User.email == "gina@example.com").one()
        assert user.user_name == "Gina.Lopez"
        assert user.password_hash is None
        assert user.google_id == "g-123"
        payload = jwt.decode(data["token"], settings.SECRET_KEY, algorithms=[ALGORITHM])
        assert payload["id"] == user.id

    def test_existing_email_is_linked(self, client, db_session, test_user, identity_verifier):
        identity_verifier.identities["good"] = FederatedIdentity(
            subject="g-456", email=test_user.email, name="Alice"
        )

        response = client.post("/api/auth/google-login", json={"token": "good"})

        assert response.status_code == 200
        assert response.json()["user"]["id"] == test_user.id
        db_session.refresh(test_user)
        assert test_user.google_id == "g-456"
        assert db_session.query(User).count() == 1

    def test_user_name_from_email_is_made_unique(
        self, client, db_session, make_user, identity_verifier
    ):
        make_user("sam", email="sam@other.com")
        identity_verifier.identities["good"] = FederatedIdentity(
            subject="g-789", email="sam@example.com"
        )

        response = client.post("/api/auth/google-login", json={"token": "good"})

        assert response.status_code == 200
        assert response.json()["user"]["userName"] == "sam2"

    def test_email_linked_to_other_google_account_is_rejected(
        self, client, db_session, test_user, identity_verifier
    ):
        test_user.google_id = "g-original"
        db_session.commit()
        identity_verifier.identities["good"] = FederatedIdentity(
            subject="g-newcomer", email=test_user.email, name="Alice"
        )

        response = client.post("/api/auth/google-login", json={"token": "good"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid Google token"
        db_session.refresh(test_user)
        assert test_user.google_id == "g-original"

    def test_same_google_account_logs_in_again(
        self, client, db_session, test_user, identity_verifier
    ):
        test_user.google_id = "g-456"
        db_session.commit()
        identity_verifier.identities["good"] = FederatedIdentity(
            subject="g-456", email=test_user.email
        )

        response = client.post("/api/auth/google-login", json={"token": "good"})

        assert response.status_code == 200
        assert response.json()["user"]["id"] == test_user.id

    def test_first_login_race_is_400(
        self, client, db_session, monkeypatch, test_user, identity_verifier
    ):
        # The email lookup ran before a concurrent request created the account
        monkeypatch.setattr(accounts, "find_by_email", lambda *args, **kwargs: None)
        identity_verifier.identities["good"] = FederatedIdentity(
            subject="g-456", email=test_user.email, name="Alice"
        )

        response = client.post("/api/auth/google-login", json={"token": "good"})

        assert response.status_code == 400
        assert response.json()["detail"] == "User already exists"
        assert db_session.query(User).count() == 1


@pytest.mark.unit
class TestGoogleIdentityVerifier:
    def test_unconfigured_verifier_rejects(self):
        verifier = GoogleIdentityVerifier()

        with pytest.raises(FederatedIdentityError):
            verifier.verify("anything")

    def test_oauth2_token(self):
        verifier = GoogleIdentityVerifier(client_id="client-1")
        claims = {"sub": "g-1", "email": "a@x.com", "email_verified": True, "name": "A"}

        with patch(
            "app.core.federated.id_token.verify_oauth2_token", return_value=claims
        ) as verify:
            identity = verifier.verify("assertion")

        assert identity == FederatedIdentity(subject="g-1", email="a@x.com", name="A")
        assert verify.call_args.kwargs["audience"] == "client-1"

    def test_firebase_token(self):
        verifier = GoogleIdentityVerifier(firebase_project_id="proj-1")
        claims = {"sub": "f-1", "email": "a@x.com"}

        with patch(
            "app.core.federated.id_token.verify_firebase_token", return_value=claims
        ) as verify:
            identity = verifier.verify("assertion")

        assert identity.subject == "f-1"
        assert verify.call_args.kwargs["audience"] == "proj-1"

    def test_invalid_signature(self):
        verifier = GoogleIdentityVerifier(client_id="client-1")

        with patch(
            "app.core.federated.id_token.verify_oauth2_token",
            side_effect=ValueError("Token expired"),
        ):
            with pytest.raises(FederatedIdentityError):
                verifier.verify("assertion")

    def test_unverified_email(self):
        verifier = GoogleIdentityVerifier(client_id="client-1")
        claims = {"sub": "g-1", "email": "a@x.com", "email_verified": False}

        with patch(
            "app.core.federated.id_token.verify_oauth2_token", return_value=claims
        ):
            with pytest.raises(FederatedIdentityError):
                verifier.verify("assertion")
