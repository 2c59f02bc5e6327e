from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from backend.fleetdesk.core.security import create_access_token, decode_access_token
from backend.fleetdesk.core.settings import get_settings
from backend.fleetdesk.db.base import Base
from backend.fleetdesk.db.session import SessionLocal, engine
from backend.fleetdesk.main import app
from backend.fleetdesk.models.tenant import Tenant
from backend.fleetdesk.models.user import User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_user(email: str, with_tenant: bool = True, is_active: bool = True) -> int:
    db = SessionLocal()
    try:
        tenant_id = None
        if with_tenant:
            tenant = Tenant(name="Trans-Pol")
            db.add(tenant)
            db.flush()
            tenant_id = tenant.id
        user = User(email=email, name="Dispatcher", tenant_id=tenant_id, is_active=is_active)
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def auth_header(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id=user_id)}"}


def test_token_carries_user_id_as_subject():
    payload = decode_access_token(create_access_token(user_id=42))
    assert payload["sub"] == "42"
    assert "exp" in payload


def test_decode_rejects_expired_and_malformed_tokens():
    with pytest.raises(ValueError):
        decode_access_token(create_access_token(user_id=1, expires_minutes=-1))
    with pytest.raises(ValueError):
        decode_access_token("invalid.token.value")


def test_missing_token_is_rejected():
    client = TestClient(app)
    resp = client.get("/api/orders/")
    assert resp.status_code == 401


def test_garbage_token_is_rejected():
    client = TestClient(app)
    resp = client.get("/api/orders/", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_expired_token_is_rejected():
    client = TestClient(app)
    user_id = create_user("expired@example.com")
    token = create_access_token(user_id=user_id, expires_minutes=-1)
    resp = client.get("/api/orders/", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_token_for_unknown_user_is_rejected():
    client = TestClient(app)
    resp = client.get("/api/orders/", headers=auth_header(999))
    assert resp.status_code == 401


def test_inactive_user_is_rejected():
    client = TestClient(app)
    user_id = create_user("inactive@example.com", is_active=False)
    resp = client.get("/api/orders/", headers=auth_header(user_id))
    assert resp.status_code == 401


def test_user_without_tenant_is_forbidden():
    client = TestClient(app)
    user_id = create_user("loner@example.com", with_tenant=False)
    resp = client.get("/api/orders/", headers=auth_header(user_id))
    assert resp.status_code == 403
    assert resp.json()["detail"] == "No tenant assigned"


def test_valid_token_reaches_endpoint():
    client = TestClient(app)
    user_id = create_user("ok@example.com")
    resp = client.get("/api/orders/", headers=auth_header(user_id))
    assert resp.status_code == 200
    assert resp.json()["data"] == []


def test_token_with_non_numeric_subject_is_rejected():
    client = TestClient(app)
    create_user("dispatch@example.com")
    expire = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = jwt.encode({"sub": "dispatch@example.com", "exp": expire}, get_settings().SECRET_KEY, algorithm="HS256")
    resp = client.get("/api/orders/", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
