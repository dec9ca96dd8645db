from __future__ import annotations

import hashlib

from core.identity import IdentityRegistry, compute_identity_id, resolve_identity


def test_identity_id_is_deterministic() -> None:
    first = resolve_identity("B62qabc", "1.2.3.4")
    second = resolve_identity("B62qabc", "1.2.3.4")
    assert first == second
    assert first.id == compute_identity_id("B62qabc", "1.2.3.4")


def test_identity_id_is_md5_of_key_dash_ip() -> None:
    # Fixed digest so ids stay stable across processes and releases.
    expected = hashlib.md5(b"abc-1.2.3.4").hexdigest()
    assert compute_identity_id("abc", "1.2.3.4") == expected
    assert len(expected) == 32


def test_identity_id_is_order_sensitive() -> None:
    assert compute_identity_id("abc", "1.2.3.4") != compute_identity_id("1.2.3.4", "abc")


def test_distinct_pairs_do_not_collide() -> None:
    pairs = [(f"B62q{key}", f"10.0.{ip}.1") for key in range(40) for ip in range(25)]
    ids = {compute_identity_id(key, ip) for key, ip in pairs}
    assert len(ids) == len(pairs)


def test_register_is_idempotent() -> None:
    registry = IdentityRegistry()
    identity = resolve_identity("abc", "1.2.3.4")

    assert registry.register(identity)
    assert not registry.register(identity)
    assert len(registry) == 1
    assert identity.id in registry


def test_registry_counts_distinct_pairs() -> None:
    registry = IdentityRegistry()
    for key, ip in [("abc", "1.2.3.4"), ("abc", "5.6.7.8"), ("def", "1.2.3.4"), ("abc", "1.2.3.4")]:
        registry.register(resolve_identity(key, ip))
    assert len(registry) == 3


def test_registry_as_dict_uses_identity_fields() -> None:
    registry = IdentityRegistry()
    identity = resolve_identity("abc", "1.2.3.4")
    registry.register(identity)
    assert registry.as_dict() == {
        identity.id: {"id": identity.id, "public-key": "abc", "public-ip": "1.2.3.4"}
    }
