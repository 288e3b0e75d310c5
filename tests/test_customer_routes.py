from firewood_ops.utils.cache import ReferenceCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_cache_entries_expire():
    clock = FakeClock()
    cache = ReferenceCache(ttl_seconds=60, timer=clock)

    cache.set("customers:all", ["a"])
    clock.now = 59
    assert cache.get("customers:all") == ["a"]

    clock.now = 61
    assert cache.get("customers:all") is None
    assert len(cache) == 0


def test_cache_invalidate():
    cache = ReferenceCache()
    cache.set("a", 1)
    cache.set("b", 2)

    assert cache.invalidate("a") is True
    assert cache.invalidate("a") is False
    assert cache.invalidate_all() == 1
    assert len(cache) == 0
    assert cache.get("b") is None


async def test_get_or_load_calls_loader_once():
    cache = ReferenceCache()
    calls = []

    async def loader():
        calls.append(1)
        return ["row"]

    assert await cache.get_or_load("k", loader) == ["row"]
    assert await cache.get_or_load("k", loader) == ["row"]
    assert len(calls) == 1


async def test_create_and_fetch_customer(client):
    created = await client.post(
        "/customers/",
        json={"name": "Maple Farm", "address": "1 Sugar Ln", "customer_type": "wholesale"},
    )
    assert created.status_code == 201
    body = created.json()
    assert body["customer_type"] == "wholesale"

    fetched = await client.get(f"/customers/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Maple Farm"

    assert (await client.get("/customers/missing")).status_code == 404


async def test_customer_list_is_cached_until_write(client, make_customer):
    assert (await client.get("/customers/")).json() == []

    # Written behind the API's back, so the cached list is still served
    await make_customer(name="Hidden Hollow")
    assert (await client.get("/customers/")).json() == []

    created = await client.post("/customers/", json={"name": "Aspen Ridge"})
    assert created.status_code == 201

    names = [c["name"] for c in (await client.get("/customers/")).json()]
    assert names == ["Aspen Ridge", "Hidden Hollow"]


async def test_update_customer_invalidates_list(client):
    created = (await client.post("/customers/", json={"name": "Old Mill"})).json()
    await client.get("/customers/")

    updated = await client.put(f"/customers/{created['id']}", json={"phone": "555-0142"})
    assert updated.status_code == 200
    assert updated.json()["phone"] == "555-0142"

    listed = (await client.get("/customers/")).json()
    assert listed[0]["phone"] == "555-0142"

    missing = await client.put("/customers/missing", json={"name": "x"})
    assert missing.status_code == 404
