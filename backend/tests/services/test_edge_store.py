"""SQL Edge Store — verifies the relationship store contract against a real database.

Invariants:
    - Second create_edge for the same ordered pair raises DuplicateEdgeError
    - The opposite direction is a different pair
    - transaction() rolls back every write when anything inside fails
    - set_status honors expected_prior_status and refreshes updated_at
    - upsert_accepted creates or promotes in one statement
    - Listings filter and order as the query projections require
"""

from datetime import timedelta

import pytest

from app.core.domain_types import EdgeStatus
from app.core.errors import DuplicateEdgeError


async def test_create_edge_returns_snapshot(store, alice, bob):
    async with store.transaction():
        edge = await store.create_edge(alice, bob, EdgeStatus.PENDING)

    assert edge.from_user == alice
    assert edge.to_user == bob
    assert edge.status == EdgeStatus.PENDING
    assert edge.created_at == edge.updated_at


async def test_duplicate_ordered_pair_rejected_by_constraint(store, alice, bob):
    async with store.transaction():
        await store.create_edge(alice, bob, EdgeStatus.PENDING)

    with pytest.raises(DuplicateEdgeError):
        async with store.transaction():
            await store.create_edge(alice, bob, EdgeStatus.ACCEPTED)

    edge = await store.find_edge(alice, bob)
    assert edge.status == EdgeStatus.PENDING


async def test_opposite_direction_is_a_separate_edge(store, alice, bob):
    async with store.transaction():
        await store.create_edge(alice, bob, EdgeStatus.PENDING)
        await store.create_edge(bob, alice, EdgeStatus.PENDING)

    assert await store.find_edge(alice, bob) is not None
    assert await store.find_edge(bob, alice) is not None


async def test_transaction_rolls_back_earlier_writes(store, alice, bob):
    async with store.transaction():
        reverse = await store.create_edge(bob, alice, EdgeStatus.PENDING)

    with pytest.raises(RuntimeError):
        async with store.transaction():
            await store.set_status(reverse.id, EdgeStatus.ACCEPTED)
            raise RuntimeError("crash between the two writes")

    assert (await store.find_by_id(reverse.id)).status == EdgeStatus.PENDING


async def test_find_pending_reverse_only_matches_pending(store, alice, bob):
    async with store.transaction():
        reverse = await store.create_edge(bob, alice, EdgeStatus.PENDING)

    found = await store.find_pending_reverse(alice, bob)
    assert found.id == reverse.id

    async with store.transaction():
        await store.set_status(reverse.id, EdgeStatus.REJECTED)

    assert await store.find_pending_reverse(alice, bob) is None


async def test_set_status_guard_misses_on_wrong_prior(store, alice, bob):
    async with store.transaction():
        edge = await store.create_edge(alice, bob, EdgeStatus.REJECTED)

    async with store.transaction():
        changed = await store.set_status(
            edge.id, EdgeStatus.ACCEPTED, expected_prior_status=EdgeStatus.PENDING,
        )

    assert changed is False
    assert (await store.find_by_id(edge.id)).status == EdgeStatus.REJECTED


async def test_set_status_refreshes_updated_at(store, alice, bob):
    async with store.transaction():
        edge = await store.create_edge(alice, bob, EdgeStatus.PENDING)
    before = (await store.find_by_id(edge.id)).updated_at

    async with store.transaction():
        assert await store.set_status(edge.id, EdgeStatus.ACCEPTED)

    after = await store.find_by_id(edge.id)
    assert after.status == EdgeStatus.ACCEPTED
    assert after.updated_at >= before
    assert after.created_at == before


async def test_upsert_accepted_creates_missing_edge(store, alice, bob):
    async with store.transaction():
        await store.upsert_accepted(alice, bob)

    edge = await store.find_edge(alice, bob)
    assert edge.status == EdgeStatus.ACCEPTED


async def test_upsert_accepted_promotes_existing_edge(store, alice, bob):
    async with store.transaction():
        original = await store.create_edge(alice, bob, EdgeStatus.PENDING)
    async with store.transaction():
        await store.upsert_accepted(alice, bob)

    edge = await store.find_edge(alice, bob)
    assert edge.id == original.id
    assert edge.status == EdgeStatus.ACCEPTED


async def test_listings_filter_by_direction_and_status(store, make_user, alice):
    carol = await make_user("Carol")
    dave = await make_user("Dave")
    async with store.transaction():
        await store.create_edge(carol, alice, EdgeStatus.PENDING)
        await store.create_edge(dave, alice, EdgeStatus.REJECTED)
        await store.create_edge(alice, carol, EdgeStatus.PENDING)

    incoming = await store.list_incoming_pending(alice)
    outgoing = await store.list_outgoing(alice)

    assert [e.from_user for e in incoming] == [carol]
    assert [e.to_user for e in outgoing] == [carol]
    assert await store.count_incoming_pending(alice) == 1


async def test_incoming_ordered_newest_first(store, make_user, alice):
    carol = await make_user("Carol")
    dave = await make_user("Dave")
    async with store.transaction():
        await store.create_edge(carol, alice, EdgeStatus.PENDING)
    async with store.transaction():
        await store.create_edge(dave, alice, EdgeStatus.PENDING)

    incoming = await store.list_incoming_pending(alice)

    assert [e.from_user for e in incoming] == [dave, carol]


async def test_list_accepted_covers_both_directions(store, alice, bob, make_user):
    carol = await make_user("Carol")
    async with store.transaction():
        await store.create_edge(alice, bob, EdgeStatus.ACCEPTED)
        await store.create_edge(carol, alice, EdgeStatus.ACCEPTED)
        await store.create_edge(bob, carol, EdgeStatus.ACCEPTED)

    accepted = await store.list_accepted(alice)

    assert {(e.from_user, e.to_user) for e in accepted} == {(alice, bob), (carol, alice)}


async def test_inserted_and_read_snapshots_are_equal(store, alice, bob):
    async with store.transaction():
        created = await store.create_edge(alice, bob, EdgeStatus.PENDING)

    read = await store.find_edge(alice, bob)

    assert read == created
    assert read.created_at.tzinfo is not None
    assert read.updated_at.utcoffset() == timedelta(0)
