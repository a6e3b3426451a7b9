"""
Unit tests for the allowance registry and attribute store.
"""

import pytest

from nftledger.core.allowances import AllowanceRegistry
from nftledger.core.attributes import AttributeStore
from nftledger.core.types import Id

TOKEN = Id.u32(7)
OTHER = Id.u32(8)


class TestAllowanceRegistry:
    def test_single_and_blanket_tiers_are_separate(self, alice, bob):
        registry = AllowanceRegistry()
        registry.add_allowance_operator(alice, bob, TOKEN)

        assert registry.is_allowed(alice, bob, TOKEN)
        assert not registry.is_allowed(alice, bob)
        assert not registry.is_allowed(alice, bob, OTHER)

    def test_effective_allowance_is_disjunction(self, alice, bob):
        registry = AllowanceRegistry()
        assert not registry.is_effectively_allowed(alice, bob, TOKEN)

        registry.add_allowance_operator(alice, bob)
        assert registry.is_effectively_allowed(alice, bob, TOKEN)
        assert registry.is_effectively_allowed(alice, bob, OTHER)

    def test_add_is_idempotent(self, alice, bob):
        registry = AllowanceRegistry()
        registry.add_allowance_operator(alice, bob, TOKEN)
        registry.add_allowance_operator(alice, bob, TOKEN)
        assert registry.single_count() == 1

    def test_remove_absent_is_noop(self, alice, bob, carol):
        registry = AllowanceRegistry()
        registry.remove_allowance_operator(alice, bob, TOKEN)
        registry.remove_allowance_operator(alice, bob)

        registry.add_allowance_operator(alice, carol, TOKEN)
        registry.remove_allowance_operator(alice, bob, TOKEN)
        assert registry.is_allowed(alice, carol, TOKEN)

    def test_remove_last_operator_drops_entry(self, alice, bob):
        registry = AllowanceRegistry()
        registry.add_allowance_operator(alice, bob)
        registry.remove_allowance_operator(alice, bob)
        assert registry.blanket_count() == 0
        assert registry.operators_for(alice) == []

    def test_remove_token_allowances_clears_every_operator(self, alice, bob, carol):
        registry = AllowanceRegistry()
        registry.add_allowance_operator(alice, bob, TOKEN)
        registry.add_allowance_operator(alice, carol, TOKEN)
        registry.add_allowance_operator(alice, bob, OTHER)
        registry.add_allowance_operator(alice, bob)

        cleared = registry.remove_token_allowances(alice, TOKEN)

        assert cleared == [bob, carol]
        assert not registry.is_allowed(alice, bob, TOKEN)
        assert not registry.is_allowed(alice, carol, TOKEN)
        assert registry.is_allowed(alice, bob, OTHER)
        assert registry.is_allowed(alice, bob)

    def test_remove_all_for_token_spans_owners(self, alice, bob, carol):
        registry = AllowanceRegistry()
        registry.add_allowance_operator(alice, bob, TOKEN)
        registry.add_allowance_operator(carol, bob, TOKEN)
        registry.add_allowance_operator(carol, alice, TOKEN)
        registry.add_allowance_operator(alice, bob, OTHER)

        assert registry.remove_all_for_token(TOKEN) == 3

        assert not registry.is_allowed(alice, bob, TOKEN)
        assert not registry.is_allowed(carol, bob, TOKEN)
        assert registry.is_allowed(alice, bob, OTHER)
        assert registry.remove_all_for_token(TOKEN) == 0
        assert TOKEN not in registry._single_owners

    def test_revoking_last_operator_forgets_owner(self, alice, bob):
        registry = AllowanceRegistry()
        registry.add_allowance_operator(alice, bob, TOKEN)
        registry.remove_allowance_operator(alice, bob, TOKEN)
        assert registry._single_owners == {}
        assert registry.single_count() == 0


class TestAttributeStore:
    def test_set_overwrites_and_get_missing_is_none(self):
        store = AttributeStore()
        assert store.get(TOKEN, b"name") is None

        store.set(TOKEN, b"name", b"first")
        store.set(TOKEN, b"name", b"second")
        assert store.get(TOKEN, b"name") == b"second"

    def test_key_spaces_are_per_token(self):
        store = AttributeStore()
        store.set(TOKEN, b"name", b"seven")
        assert store.get(OTHER, b"name") is None

    def test_accepts_future_token_ids(self):
        store = AttributeStore()
        store.set(Id.u128(10**30), b"k", b"v")
        assert Id.u128(10**30) in store

    def test_rejects_non_bytes(self):
        store = AttributeStore()
        with pytest.raises(TypeError, match="key must be bytes"):
            store.set(TOKEN, "name", b"v")
        with pytest.raises(TypeError, match="value must be bytes"):
            store.set(TOKEN, b"name", 5)

    def test_clear_reports_removed_count(self):
        store = AttributeStore()
        store.set(TOKEN, b"a", b"1")
        store.set(TOKEN, b"b", b"2")
        assert sorted(store.keys(TOKEN)) == [b"a", b"b"]
        assert store.clear(TOKEN) == 2
        assert store.clear(TOKEN) == 0
        assert store.items(TOKEN) == []
