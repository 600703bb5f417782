"""Login, token handling and login throttling."""
from pharmasales.core.rate_limiter import RateLimiter, login_limiter
from pharmasales.core.security import create_access_token, decode_access_token, verify_password


def test_login_returns_token_and_user(client, admin, password):
    response = client.post("/api/auth/login", json={"username": "ADMIN ", "password": password})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"] == {
        "username": "admin",
        "email": "admin@pharma.com",
        "firstName": "Admin",
        "lastName": "Tester",
        "role": "admin",
    }
    assert decode_access_token(data["token"]) == str(admin.id)


def test_login_wrong_password(client, admin):
    response = client.post("/api/auth/login", json={"username": "admin", "password": "nope-nope"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid credentials"}


def test_login_missing_fields(client):
    response = client.post("/api/auth/login", json={"username": "admin"})

    assert response.status_code == 400
    assert response.json()["message"] == "Please provide username and password"


def test_login_rejects_non_string_password(client, admin):
    response = client.post("/api/auth/login", json={"username": "admin", "password": 12345})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"


def test_deactivated_user_cannot_login_or_use_token(client, admin, fetch, password):
    from pharmasales.models import User

    def deactivate(db):
        db.get(User, admin.id).is_active = False
        db.commit()

    fetch(deactivate)

    login = client.post("/api/auth/login", json={"username": "admin", "password": password})
    assert login.status_code == 401
    assert client.get("/api/auth/me", headers=admin.headers).status_code == 401


def test_me_returns_profile_without_password(client, supervisor):
    response = client.get("/api/auth/me", headers=supervisor.headers)

    data = response.json()["data"]
    assert data["username"] == "supervisor"
    assert data["role"] == "pharmacy supervisor"
    assert "password" not in data and "hashed_password" not in data


def test_invalid_and_expired_tokens_are_rejected(client, admin):
    expired = create_access_token(str(admin.id), "admin", expires_minutes=-1)

    for token in ("garbage", expired):
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, token failed"


def test_login_is_throttled_per_ip(client):
    for _ in range(login_limiter.requests):
        response = client.post("/api/auth/login", json={"username": "ghost", "password": "whatever"})
        assert response.status_code == 401

    blocked = client.post("/api/auth/login", json={"username": "ghost", "password": "whatever"})

    assert blocked.status_code == 429
    assert blocked.json()["success"] is False


def test_rate_limiter_window_expires():
    limiter = RateLimiter(requests=2, window=60)

    assert limiter.is_allowed("ip:1", now=0) == (True, 1)
    assert limiter.is_allowed("ip:1", now=1) == (True, 0)
    assert limiter.is_allowed("ip:1", now=2) == (False, 0)
    assert limiter.is_allowed("ip:1", now=61)[0] is True


def test_rate_limiter_forgets_clients_outside_the_window():
    limiter = RateLimiter(requests=2, window=60)

    limiter.is_allowed("ip:1", now=0)
    limiter.is_allowed("ip:2", now=30)
    assert set(limiter.clients) == {"ip:1", "ip:2"}

    limiter.is_allowed("ip:3", now=70)
    assert set(limiter.clients) == {"ip:2", "ip:3"}

    limiter.is_allowed("ip:3", now=200)
    assert set(limiter.clients) == {"ip:3"}
    assert limiter.clients["ip:3"] == [200]


def test_verify_password_handles_bad_hash():
    assert verify_password("x", "not-a-bcrypt-hash") is False
    assert verify_password("", "whatever") is False
