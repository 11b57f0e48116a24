import asyncio
from dataclasses import replace

from eventhub.domain.entities import CodePurpose, CodeRecord

V = CodePurpose.VERIFICATION


def _record(clock, email="a@x.com", purpose=V, code="111111") -> CodeRecord:
    return CodeRecord(
        email=email,
        purpose=purpose,
        code=code,
        issued_at=clock.now,
        expires_at=clock.now,
    )


async def test_put_get_delete(store, clock):
    await store.put(_record(clock))
    assert (await store.get("a@x.com", V)).code == "111111"
    assert await store.get("a@x.com", CodePurpose.PASSWORD_RESET) is None

    await store.delete("a@x.com", V)
    assert await store.get("a@x.com", V) is None
    # deleting twice is fine
    await store.delete("a@x.com", V)


async def test_records_are_copied_in_and_out(store, clock):
    record = _record(clock)
    await store.put(record)
    record.attempts = 3

    fetched = await store.get("a@x.com", V)
    assert fetched.attempts == 0
    fetched.attempts = 4
    assert (await store.get("a@x.com", V)).attempts == 0

    await store.put(replace(fetched))
    assert (await store.get("a@x.com", V)).attempts == 4


async def test_lock_serializes_same_key(store):
    order = []

    async def worker(name):
        async with store.locked("a@x.com", V):
            order.append(f"{name}-in")
            await asyncio.sleep(0)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))
    assert order == ["a-in", "a-out", "b-in", "b-out"]


async def test_locks_for_different_keys_do_not_block(store):
    async with store.locked("a@x.com", V):
        await asyncio.wait_for(_enter(store, "b@x.com", V), timeout=1)
        await asyncio.wait_for(_enter(store, "a@x.com", CodePurpose.PASSWORD_RESET), 1)


async def _enter(store, email, purpose):
    async with store.locked(email, purpose):
        return True


async def test_lock_table_is_emptied_after_use(store):
    await asyncio.gather(*(_enter(store, "a@x.com", V) for _ in range(5)))
    await _enter(store, "b@x.com", V)
    assert store._locks == {}


async def test_lock_released_when_body_raises(store):
    try:
        async with store.locked("a@x.com", V):
            raise KeyError("boom")
    except KeyError:
        pass
    assert store._locks == {}
    assert await asyncio.wait_for(_enter(store, "a@x.com", V), timeout=1)
