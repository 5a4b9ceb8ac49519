from datetime import datetime, timedelta, timezone

import pytest

from repository.batch_repository import new_batch

T0 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def test_new_batch_names_items():
    batch = new_batch("u1", ["first text", "second text"], ["essay.txt"], now=T0, max_chars=5)

    assert batch.status == "pending"
    assert batch.totalItems == 2
    assert [i.filename for i in batch.items] == ["essay.txt", "Document 2"]
    assert [i.id for i in batch.items] == [f"{batch.id}-0", f"{batch.id}-1"]
    assert batch.items[0].text == "first"


@pytest.mark.anyio
async def test_snapshots_are_isolated(batch_repo):
    batch = new_batch("u1", ["a text"], now=T0)
    await batch_repo.put(batch)

    batch.status = "processing"
    stored = await batch_repo.get(batch.id)
    assert stored.status == "pending"

    stored.items[0].status = "failed"
    again = await batch_repo.get(batch.id)
    assert again.items[0].status == "pending"


@pytest.mark.anyio
async def test_entries_expire_after_ttl(batch_repo, clock):
    batch = new_batch("u1", ["a text"], now=T0)
    await batch_repo.put(batch)

    clock.advance(3599)
    assert await batch_repo.get(batch.id) is not None
    clock.advance(1)
    assert await batch_repo.get(batch.id) is None
    assert len(batch_repo) == 0


@pytest.mark.anyio
async def test_put_refreshes_ttl(batch_repo, clock):
    batch = new_batch("u1", ["a text"], now=T0)
    await batch_repo.put(batch)
    clock.advance(3000)
    await batch_repo.put(batch)
    clock.advance(3000)
    assert await batch_repo.get(batch.id) is not None


@pytest.mark.anyio
async def test_list_for_owner_newest_first(batch_repo):
    older = new_batch("u1", ["a"], now=T0)
    newer = new_batch("u1", ["b"], now=T0 + timedelta(minutes=5))
    foreign = new_batch("u2", ["c"], now=T0)
    for b in (older, newer, foreign):
        await batch_repo.put(b)

    listed = await batch_repo.list_for_owner("u1")

    assert [b.id for b in listed] == [newer.id, older.id]


@pytest.mark.anyio
async def test_delete(batch_repo):
    batch = new_batch("u1", ["a"], now=T0)
    await batch_repo.put(batch)

    assert await batch_repo.delete(batch.id) is True
    assert await batch_repo.delete(batch.id) is False
    assert await batch_repo.get(batch.id) is None
