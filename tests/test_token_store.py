"""Behavioural tests shared by every token store implementation"""

import asyncio
import math
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from src.core.exceptions import (ConflictError, InvalidArgumentError,
                                 NotFoundError)
from src.core.models import HASH_MAX_LENGTH, Pagination, PersonalAccessToken
from src.core.providers import FixedClock, SequenceIdentifierProvider
from tests.factories import new_token


async def create_for_user(store, user_id, count, **overrides):
    created = []
    for i in range(count):
        created.append(
            await store.create(new_token(user_id=user_id, name=str(i), **overrides))
        )
    return created


async def fetch_all_pages(store, user_id, page_size):
    first = await store.list_for_user(user_id, Pagination(page=1, page_size=page_size))
    pages = [first]
    for page in range(2, max(1, math.ceil(first.total / page_size)) + 1):
        pages.append(
            await store.list_for_user(user_id, Pagination(page=page, page_size=page_size))
        )
    return pages


class TestCreateAndGet:
    """Test create and point lookup"""

    @pytest.mark.asyncio
    async def test_get_returns_created_token(self, store):
        """Test round trip through create and get"""
        token = new_token()

        created = await store.create(token)
        fetched = await store.get(created.id)

        assert created == token
        assert fetched == token
        assert fetched.scopes == ["read", "write"]
        assert fetched.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_create_echoes_caller_id(self, store):
        """Test that a caller-supplied id is kept"""
        token = new_token()

        result = await store.create(token)

        assert result.id == token.id

    @pytest.mark.asyncio
    async def test_create_duplicate_id_conflicts(self, store):
        """Test that a second create with the same id fails"""
        token = new_token()
        await store.create(token)

        with pytest.raises(ConflictError) as exc_info:
            await store.create(new_token(id=token.id, hash="another-secure-hash"))

        assert exc_info.value.resource_id == str(token.id)
        assert exc_info.value.operation == "create"

        # The original row is untouched
        assert (await store.get(token.id)).hash == "some-secure-hash"

    @pytest.mark.asyncio
    async def test_get_unknown_id_not_found(self, store):
        """Test lookup of an identifier that was never used"""
        missing = uuid4()

        with pytest.raises(NotFoundError) as exc_info:
            await store.get(missing)

        assert exc_info.value.resource_id == str(missing)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_hash", ["", "   "])
    async def test_create_rejects_empty_hash(self, store, bad_hash):
        """Test that the hash is required"""
        token = new_token(hash=bad_hash)

        with pytest.raises(InvalidArgumentError):
            await store.create(token)

        with pytest.raises(NotFoundError):
            await store.get(token.id)

    @pytest.mark.asyncio
    async def test_create_rejects_oversized_hash(self, store):
        """Test that a hash wider than its column is invalid input"""
        token = new_token(hash="x" * (HASH_MAX_LENGTH + 1))

        with pytest.raises(InvalidArgumentError) as exc_info:
            await store.create(token)

        assert exc_info.value.operation == "create"
        with pytest.raises(NotFoundError):
            await store.get(token.id)

    @pytest.mark.asyncio
    async def test_create_accepts_hash_at_column_width(self, store):
        token = await store.create(new_token(hash="x" * HASH_MAX_LENGTH))

        assert len((await store.get(token.id)).hash) == HASH_MAX_LENGTH

    @pytest.mark.asyncio
    async def test_create_fills_missing_id_and_timestamps(self, store_factory):
        """Test identifier and clock providers fill unset fields"""
        instant = datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)
        assigned = uuid4()
        store = store_factory(
            clock=FixedClock(instant),
            id_provider=SequenceIdentifierProvider([assigned]),
        )
        token = new_token(id=None, created_at=None, last_modified=None)

        created = await store.create(token)

        assert created.id == assigned
        assert created.created_at == instant
        assert created.last_modified == instant
        assert await store.get(assigned) == created
        # The caller's object is not mutated
        assert token.id is None

    @pytest.mark.asyncio
    async def test_naive_timestamps_are_treated_as_utc(self, store):
        """Test that naive datetimes come back as aware UTC"""
        naive = datetime(2024, 1, 2, 3, 4, 5, 600000)
        token = new_token(created_at=naive, last_modified=naive, expiration_time=naive)

        fetched = await store.get((await store.create(token)).id)

        expected = naive.replace(tzinfo=timezone.utc)
        assert fetched.created_at == expected
        assert fetched.expiration_time == expected

    @pytest.mark.asyncio
    async def test_scope_order_is_preserved(self, store):
        """Test scopes round trip in their original order"""
        scopes = ["write", "admin", "read", "read:repository"]
        token = await store.create(new_token(scopes=scopes))

        assert (await store.get(token.id)).scopes == scopes

    @pytest.mark.asyncio
    async def test_empty_scopes_round_trip(self, store):
        token = await store.create(new_token(scopes=[]))

        assert (await store.get(token.id)).scopes == []

    @pytest.mark.asyncio
    async def test_returned_tokens_are_independent_copies(self, store):
        """Test that mutating a returned token does not affect the store"""
        created = await store.create(new_token())

        created.scopes.append("admin")
        fetched = await store.get(created.id)
        fetched.scopes.append("delete")
        fetched.name = "renamed"

        again = await store.get(created.id)
        assert again.scopes == ["read", "write"]
        assert again.name == "some-name"


class TestListForUser:
    """Test paginated listing"""

    @pytest.mark.asyncio
    async def test_list_scopes_results_to_owner(self, store):
        """Test tokens are only listed for their owner"""
        user_a, user_b = uuid4(), uuid4()
        now = datetime.now(timezone.utc)
        await store.create(new_token(user_id=user_a, created_at=now - timedelta(minutes=1)))
        await store.create(new_token(user_id=user_a, created_at=now))
        await store.create(new_token(user_id=user_b))
        pagination = Pagination(page=1, page_size=10)

        tokens_a = await store.list_for_user(user_a, pagination)
        tokens_b = await store.list_for_user(user_b, pagination)

        assert len(tokens_a.results) == 2
        assert tokens_a.total == 2
        assert all(t.user_id == user_a for t in tokens_a.results)
        assert len(tokens_b.results) == 1
        assert tokens_b.total == 1
        assert tokens_b.results[0].user_id == user_b

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,page_size", [(1, 1), (1, 10), (3, 5)])
    async def test_list_user_without_tokens(self, store, page, page_size):
        """Test an owner with no tokens yields an empty page"""
        await store.create(new_token())

        result = await store.list_for_user(uuid4(), Pagination(page=page, page_size=page_size))

        assert result.results == []
        assert result.total == 0

    @pytest.mark.asyncio
    async def test_paginate_through_results(self, store):
        """Test 11 tokens paged by 5"""
        user = uuid4()
        await create_for_user(store, user, 11)

        batch1 = await store.list_for_user(user, Pagination(page=1, page_size=5))
        batch2 = await store.list_for_user(user, Pagination(page=2, page_size=5))
        batch3 = await store.list_for_user(user, Pagination(page=3, page_size=5))

        assert len(batch1.results) == 5
        assert batch1.total == 11
        assert len(batch2.results) == 5
        assert batch2.total == 11
        assert len(batch3.results) == 1
        assert batch3.total == 11

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count,page_size", [(11, 5), (10, 5), (1, 3), (7, 7), (9, 2)])
    async def test_pages_cover_every_token_once(self, store, count, page_size):
        """Test pages concatenate to all tokens without gaps or duplicates"""
        user = uuid4()
        created = await create_for_user(store, user, count)

        pages = await fetch_all_pages(store, user, page_size)
        ids = [t.id for page in pages for t in page.results]

        assert len(pages) == math.ceil(count / page_size)
        assert len(ids) == count
        assert set(ids) == {t.id for t in created}
        assert len(pages[-1].results) == (count % page_size or page_size)
        assert {page.total for page in pages} == {count}

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, store):
        """Test an out-of-range page returns no rows but the real total"""
        user = uuid4()
        await create_for_user(store, user, 3)

        result = await store.list_for_user(user, Pagination(page=5, page_size=2))

        assert result.results == []
        assert result.total == 3

    @pytest.mark.asyncio
    async def test_results_are_newest_first(self, store):
        """Test descending creation order"""
        user = uuid4()
        base = datetime(2024, 3, 1, tzinfo=timezone.utc)
        for offset in [3, 0, 4, 1, 2]:
            await store.create(new_token(
                user_id=user,
                name=f"t{offset}",
                created_at=base + timedelta(seconds=offset),
            ))

        result = await store.list_for_user(user, Pagination(page=1, page_size=10))

        assert [t.name for t in result.results] == ["t4", "t3", "t2", "t1", "t0"]

    @pytest.mark.asyncio
    async def test_identical_timestamps_are_ordered_by_id(self, store_factory):
        """Test deterministic tie-break for same-instant inserts"""
        instant = datetime(2024, 6, 1, 8, 0, 0, 0, tzinfo=timezone.utc)
        store = store_factory(clock=FixedClock(instant))
        user = uuid4()
        created = await create_for_user(
            store, user, 12, created_at=None, last_modified=None
        )
        expected = sorted((t.id for t in created), reverse=True)

        pages = await fetch_all_pages(store, user, 5)
        paged_ids = [t.id for page in pages for t in page.results]

        assert all(t.created_at == instant for t in created)
        assert paged_ids == expected

    @pytest.mark.asyncio
    async def test_repeated_listing_is_stable(self, store_factory):
        """Test identical calls return identical order"""
        instant = datetime(2024, 6, 1, tzinfo=timezone.utc)
        store = store_factory(clock=FixedClock(instant))
        user = uuid4()
        await create_for_user(store, user, 4, created_at=None, last_modified=None)
        await create_for_user(store, user, 4)

        first = await fetch_all_pages(store, user, 3)
        second = await fetch_all_pages(store, user, 3)

        assert [[t.id for t in p.results] for p in first] == [
            [t.id for t in p.results] for p in second
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "page,page_size",
        [(0, 5), (-1, 5), (1, 0), (1, -3), (0, 0), (1, 101)],
    )
    async def test_invalid_pagination_rejected(self, store, page, page_size):
        """Test bounds checking of the page descriptor"""
        with pytest.raises(InvalidArgumentError) as exc_info:
            await store.list_for_user(uuid4(), Pagination(page=page, page_size=page_size))

        assert exc_info.value.operation == "list_for_user"
        assert exc_info.value.errors

    @pytest.mark.asyncio
    async def test_listing_sees_completed_creates(self, store):
        """Test concurrent creates are all visible once they return"""
        user = uuid4()

        await asyncio.gather(*[
            store.create(new_token(user_id=user, name=f"c{i}")) for i in range(10)
        ])
        result = await store.list_for_user(user, Pagination(page=1, page_size=20))

        assert result.total == 10
        assert len({t.id for t in result.results}) == 10

    @pytest.mark.asyncio
    async def test_listed_tokens_match_get(self, store):
        """Test list rows equal point lookups"""
        user = uuid4()
        created = await create_for_user(store, user, 3)

        result = await store.list_for_user(user, Pagination(page=1, page_size=3))

        for token in result.results:
            assert token == await store.get(token.id)
        assert isinstance(result.results[0], PersonalAccessToken)
        assert {t.id for t in result.results} == {t.id for t in created}
