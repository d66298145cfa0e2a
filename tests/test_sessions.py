"""Server-side sessions: the cookie carries an opaque id, the data stays in the store."""

import json

from conftest import login, register
from storefront.services.session_store import RedisSessionStore
from storefront.utils.settings import SESSION_COOKIE_NAME, SESSION_TTL_SECONDS


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.ttl = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttl[key] = ttl

    def delete(self, key):
        self.data.pop(key, None)


def test_redis_store_round_trip():
    fake = FakeRedis()
    store = RedisSessionStore(client=fake)

    store.save("abc", {"user_id": "42"}, 60)

    assert json.loads(fake.data["session:abc"]) == {"user_id": "42"}
    assert fake.ttl["session:abc"] == 60
    assert store.load("abc") == {"user_id": "42"}

    store.delete("abc")
    assert store.load("abc") is None


def test_redis_store_ignores_unreadable_payload():
    fake = FakeRedis()
    fake.data["session:bad"] = "{not json"
    assert RedisSessionStore(client=fake).load("bad") is None


def test_cookie_is_opaque_and_expires_in_a_week(client, session_store):
    resp = register(client, "alice", follow_redirects=False)

    session_id = client.cookies.get(SESSION_COOKIE_NAME)
    assert session_id
    assert "alice" not in session_id
    assert "user_id" in session_store.load(session_id)
    assert session_store.ttls[session_id] == SESSION_TTL_SECONDS

    cookie = resp.headers["set-cookie"].lower()
    assert f"max-age={SESSION_TTL_SECONDS}" in cookie
    assert "httponly" in cookie


def test_anonymous_visit_creates_no_session(client, session_store):
    client.get("/listings")
    assert session_store.sessions == {}


def test_forged_session_id_is_anonymous(client):
    resp = client.get("/cart", headers={"Cookie": f"{SESSION_COOKIE_NAME}=made-up"}, follow_redirects=False)
    assert resp.headers["location"] == "/login"


def test_login_issues_a_new_session_id(make_client, session_store):
    register(make_client(), "alice")
    visitor = make_client()
    visitor.get("/cart", follow_redirects=False)
    before = visitor.cookies.get(SESSION_COOKIE_NAME)
    assert before

    login(visitor, "alice", follow_redirects=False)

    after = visitor.cookies.get(SESSION_COOKIE_NAME)
    assert after and after != before
    assert session_store.load(before) is None
    assert "user_id" in session_store.load(after)


def test_logout_issues_a_new_session_id(alice, session_store):
    before = alice.cookies.get(SESSION_COOKIE_NAME)

    alice.get("/logout", follow_redirects=False)

    after = alice.cookies.get(SESSION_COOKIE_NAME)
    assert after != before
    assert session_store.load(before) is None
    assert "user_id" not in session_store.load(after)
