"""
HTTP surface tests: routing, status codes and the error envelope.

The app is built around the in-memory registry from conftest, so the
lifespan connects nothing.
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from sigil_registry.crypto.messages import pattern_message, policy_message, vote_message
from sigil_registry.main import create_app


@pytest.fixture
def client(registry):
    with TestClient(create_app(registry)) as test_client:
        yield test_client


@pytest.fixture
def alice(client, make_signer):
    signer = make_signer("did:sigil:alice")
    response = client.post(
        "/register",
        json={"did": signer.did, "public_key": signer.public_key, "namespace": "alice"},
    )
    assert response.status_code == 201
    return signer


def _pattern_body(signer, **overrides):
    body = {
        "name": "aws_key",
        "category": "credential",
        "pattern": "AKIA[0-9A-Z]{16}",
        "severity": "critical",
        "author_did": signer.did,
    }
    body.update(overrides)
    body.setdefault(
        "signature",
        signer.sign(pattern_message(body["name"], body["category"], body["pattern"], signer.did)),
    )
    return body


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["service"] == "sigil-registry"
        assert body["stores"]["redis"]["status"] == "disabled"


class TestIdentityRoutes:
    def test_register_and_resolve(self, client, alice):
        response = client.get(f"/resolve/{alice.did}")
        assert response.status_code == 200
        body = response.json()
        assert body["did"] == alice.did
        assert body["status"] == "active"
        assert body["public_key"] == alice.public_key
        assert body["revoked_at"] is None

    def test_register_conflict(self, client, alice):
        response = client.post(
            "/register",
            json={"did": alice.did, "public_key": alice.public_key, "namespace": "alice"},
        )
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    def test_register_rejects_foreign_method(self, client, make_signer):
        signer = make_signer("did:web:example.com")
        response = client.post(
            "/register",
            json={"did": signer.did, "public_key": signer.public_key, "namespace": "x"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_missing_body_field_is_validation_error(self, client):
        response = client.post("/register", json={"did": "did:sigil:x"})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_resolve_unknown(self, client):
        response = client.get("/resolve/did:sigil:ghost")
        assert response.status_code == 404
        assert response.json() == {"error": "DID not found: did:sigil:ghost", "code": "NOT_FOUND"}

    def test_revoke_then_resolve_reports_revoked(self, client, alice):
        client.get(f"/resolve/{alice.did}")
        response = client.post(f"/revoke/{alice.did}")
        assert response.status_code == 200
        assert response.json()["status"] == "revoked"

        assert client.get(f"/resolve/{alice.did}").json()["status"] == "revoked"
        assert client.post(f"/revoke/{alice.did}").status_code == 404


class TestRegistryKey:
    @pytest.fixture
    def keyed_client(self, registry):
        registry.config.registry.registry_key = "s3cret"
        with TestClient(create_app(registry)) as test_client:
            yield test_client

    def test_register_without_key_is_unauthorized(self, keyed_client, make_signer):
        signer = make_signer()
        response = keyed_client.post(
            "/register",
            json={"did": signer.did, "public_key": signer.public_key, "namespace": "a"},
        )
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_register_with_wrong_key_is_unauthorized(self, keyed_client, make_signer):
        signer = make_signer()
        response = keyed_client.post(
            "/register",
            json={"did": signer.did, "public_key": signer.public_key, "namespace": "a"},
            headers={"X-Registry-Key": "guess"},
        )
        assert response.status_code == 401

    def test_register_and_revoke_with_key(self, keyed_client, make_signer):
        signer = make_signer()
        headers = {"X-Registry-Key": "s3cret"}
        response = keyed_client.post(
            "/register",
            json={"did": signer.did, "public_key": signer.public_key, "namespace": "a"},
            headers=headers,
        )
        assert response.status_code == 201
        assert keyed_client.post(f"/revoke/{signer.did}").status_code == 401
        assert keyed_client.post(f"/revoke/{signer.did}", headers=headers).status_code == 200

    def test_reads_need_no_key(self, keyed_client):
        assert keyed_client.get("/patterns").status_code == 200
        assert keyed_client.get("/health").status_code == 200


class TestPatternRoutes:
    def test_submit_returns_pending_review(self, client, alice):
        response = client.post("/patterns", json=_pattern_body(alice))
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending_review"
        assert body["name"] == "aws_key"

        fetched = client.get(f"/patterns/{body['id']}").json()
        assert fetched["verified"] is False
        assert fetched["author_did"] == alice.did

    def test_bad_regex(self, client, alice):
        response = client.post("/patterns", json=_pattern_body(alice, pattern="(", signature="x"))
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_bad_signature(self, client, alice):
        response = client.post("/patterns", json=_pattern_body(alice, signature=alice.sign("other")))
        assert response.status_code == 401
        body = response.json()
        assert body["code"] == "INVALID_SIGNATURE"
        assert body["reason"] == "SignatureMismatch"

    def test_unknown_author(self, client, make_signer):
        stranger = make_signer("did:sigil:stranger")
        response = client.post("/patterns", json=_pattern_body(stranger))
        assert response.status_code == 403
        assert response.json()["code"] == "UNKNOWN_AUTHOR"

    def test_duplicate_name(self, client, alice):
        assert client.post("/patterns", json=_pattern_body(alice)).status_code == 201
        response = client.post("/patterns", json=_pattern_body(alice))
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE"

    def test_list_with_filters(self, client, pattern_repo):
        pattern_repo.add(name="a", category="pii", pattern="a", verified=True)
        pattern_repo.add(name="b", category="secret", pattern="b")

        body = client.get("/patterns", params={"category": "pii", "verified": "true"}).json()

        assert body["count"] == 1
        assert body["patterns"][0]["name"] == "a"
        assert body["limit"] == 50

    def test_list_limit_clamped(self, client):
        body = client.get("/patterns", params={"limit": 5000, "offset": -3}).json()
        assert (body["limit"], body["offset"]) == (200, 0)

    def test_bundle_route_not_shadowed_by_id(self, client, pattern_repo):
        pattern_repo.add(name="a", category="pii", pattern="a", verified=True)
        response = client.get("/patterns/bundle")
        assert response.status_code == 200
        assert response.json()["count"] == 1

    def test_get_unknown_and_malformed_id(self, client):
        assert client.get(f"/patterns/{uuid4()}").status_code == 404
        assert client.get("/patterns/not-a-uuid").status_code == 400

    def test_vote_twice(self, client, alice, pattern_repo):
        entry_id = str(pattern_repo.add(name="a", category="pii", pattern="a"))
        body = {
            "voter_did": alice.did,
            "vote": "up",
            "signature": alice.sign(vote_message("pattern", entry_id, "up", alice.did)),
        }

        first = client.post(f"/patterns/{entry_id}/vote", json=body)
        assert first.status_code == 200
        assert first.json() == {"id": entry_id, "vote": "up", "recorded": True}

        second = client.post(f"/patterns/{entry_id}/vote", json=body)
        assert second.status_code == 409
        assert second.json()["code"] == "ALREADY_VOTED"

        assert client.get(f"/patterns/{entry_id}").json()["votes_up"] == 1

    def test_invalid_vote_direction(self, client, alice, pattern_repo):
        entry_id = str(pattern_repo.add(name="a", category="pii", pattern="a"))
        response = client.post(
            f"/patterns/{entry_id}/vote",
            json={"voter_did": alice.did, "vote": "maybe", "signature": "x"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_VOTE"


class TestPolicyRoutes:
    def test_submit_list_get_vote(self, client, alice):
        signature = alice.sign(policy_message("execute_sql", "high", "High", alice.did))
        response = client.post(
            "/policies",
            json={
                "tool_name": "execute_sql",
                "risk_level": "high",
                "requires_trust": "High",
                "requires_confirmation": True,
                "author_did": alice.did,
                "signature": signature,
            },
        )
        assert response.status_code == 201
        entry_id = response.json()["id"]
        assert response.json()["status"] == "pending_review"

        listed = client.get("/policies", params={"tool_name": "execute_sql"}).json()
        assert listed["count"] == 1

        vote = {
            "voter_did": alice.did,
            "vote": "down",
            "signature": alice.sign(vote_message("policy", entry_id, "down", alice.did)),
        }
        assert client.post(f"/policies/{entry_id}/vote", json=vote).status_code == 200
        assert client.get(f"/policies/{entry_id}").json()["votes_down"] == 1

    def test_invalid_trust_level(self, client, alice):
        response = client.post(
            "/policies",
            json={
                "tool_name": "execute_sql",
                "risk_level": "high",
                "requires_trust": "Maximum",
                "author_did": alice.did,
                "signature": "x",
            },
        )
        assert response.status_code == 400
