from datetime import datetime, timedelta, timezone

import mongomock
from fastapi import Depends, Request
from jose import jwt

from database import USERS
from dependencies import get_current_user
from schemas import TokenClaims
from security import create_access_token, verify_password
from tests.helpers import SECRET, auth_headers, register


def test_register_returns_token_and_user(client, db):
    body = register(client)

    assert body["message"] == "User registered successfully"
    assert body["user"]["name"] == "Ada Lovelace"
    assert body["user"]["email"] == "ada@example.com"
    stored = db[USERS].find_one({"email": "ada@example.com"})
    assert str(stored["_id"]) == body["user"]["id"]
    assert "createdAt" not in body["user"]


def test_register_stores_password_hash_only(client, db):
    register(client, password="plain-text-pw")

    stored = db[USERS].find_one({"email": "ada@example.com"})
    assert stored["password"] != "plain-text-pw"
    assert verify_password("plain-text-pw", stored["password"])


def test_register_twice_with_same_email(client, db):
    register(client)
    resp = client.post("/api/register", json={"name": "Someone Else", "email": "ada@example.com", "password": "x"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "User already exists"
    assert db[USERS].count_documents({"email": "ada@example.com"}) == 1


def test_register_rejects_invalid_body(client):
    resp = client.post("/api/register", json={"name": "Ada", "email": "not-an-email", "password": "pw"})
    assert resp.status_code == 400

    resp = client.post("/api/register", json={"email": "ada@example.com"})
    assert resp.status_code == 400


def test_login_token_carries_user_claims(client):
    user = register(client)["user"]

    resp = client.post("/api/login", json={"email": "ada@example.com", "password": "s3cret-pass"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"
    assert body["user"] == user

    claims = jwt.decode(body["token"], SECRET, algorithms=["HS256"])
    assert claims["userId"] == user["id"]
    assert claims["email"] == user["email"]
    assert "exp" in claims


def test_register_token_expires_after_a_day(client):
    token = register(client)["token"]
    claims = jwt.decode(token, SECRET, algorithms=["HS256"])

    remaining = claims["exp"] - datetime.now(timezone.utc).timestamp()
    assert timedelta(hours=23, minutes=59).total_seconds() < remaining <= timedelta(hours=24).total_seconds()


def test_login_failures_are_indistinguishable(client):
    register(client)

    wrong_password = client.post("/api/login", json={"email": "ada@example.com", "password": "nope"})
    unknown_email = client.post("/api/login", json={"email": "bob@example.com", "password": "s3cret-pass"})

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json() == {"detail": "Invalid credentials"}


def test_protected_route_requires_token(client):
    resp = client.get("/api/orders")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Access token required"


def test_protected_route_rejects_bad_token(client):
    resp = client.get("/api/orders", headers=auth_headers("not.a.jwt"))
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Invalid token"


def test_protected_route_rejects_token_signed_with_other_secret(client, settings):
    other = settings.model_copy(update={"signing_secret": "someone-elses-secret"})
    token = create_access_token(TokenClaims(user_id="abc", email="ada@example.com"), other)

    resp = client.get("/api/orders", headers=auth_headers(token))
    assert resp.status_code == 403


def test_protected_route_rejects_expired_token(client, settings):
    token = create_access_token(TokenClaims(user_id="abc", email="ada@example.com"), settings,
                                expires_delta=timedelta(seconds=-5))

    resp = client.get("/api/orders", headers=auth_headers(token))
    assert resp.status_code == 403


def test_unique_index_rejects_concurrent_duplicate(client, db, monkeypatch):
    register(client)
    # a concurrent registration passed the lookup before the first insert landed
    monkeypatch.setattr(mongomock.Collection, "find_one", lambda self, *args, **kwargs: None)

    resp = client.post("/api/register", json={"name": "Ada Again", "email": "ADA@example.com", "password": "x"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "User already exists"
    assert db[USERS].count_documents({"email": "ada@example.com"}) == 1


def test_authenticated_request_carries_claims(app, client):
    @app.get("/api/whoami")
    def whoami(request: Request, user: TokenClaims = Depends(get_current_user)):
        return {"state": request.state.user.model_dump(by_alias=True), "same": request.state.user is user}

    body = register(client)

    resp = client.get("/api/whoami", headers=auth_headers(body["token"]))

    assert resp.status_code == 200
    assert resp.json() == {"state": {"userId": body["user"]["id"], "email": "ada@example.com"}, "same": True}
