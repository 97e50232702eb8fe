import asyncio

import pytest

from icebreaker.domain.exceptions import InvalidRadius, UserNotFound
from icebreaker.domain.proximity.models import GeoPoint, Offset
from icebreaker.domain.proximity.store import PositionStore


@pytest.fixture
def store(config, clock):
	return PositionStore(config=config, clock=clock)


@pytest.mark.asyncio
@pytest.mark.parametrize("radius", [5, 5.0, 20, 50, 50.0])
async def test_radius_bounds_are_inclusive(store, radius):
	assert await store.update_position("u1", Offset(0, 0), radius)
	assert store.get("u1").radius == float(radius)


@pytest.mark.asyncio
@pytest.mark.parametrize("radius", [4, 4.99, 50.01, 51, -10])
async def test_out_of_bounds_radius_is_rejected(store, radius):
	with pytest.raises(InvalidRadius):
		await store.update_position("u1", Offset(0, 0), radius)
	assert "u1" not in store


@pytest.mark.asyncio
async def test_invalid_radius_does_not_touch_existing_position(store):
	await store.update_position("u1", Offset(1, 1), 20)
	with pytest.raises(InvalidRadius):
		await store.update_position("u1", Offset(9, 9), 51)
	assert store.get("u1").coordinates == Offset(1, 1)


@pytest.mark.asyncio
async def test_older_timestamp_write_is_discarded(store, clock):
	assert await store.update_position("u1", Offset(1, 1), 20, timestamp=clock.now)
	assert not await store.update_position("u1", Offset(5, 5), 30, timestamp=clock.now - 1)
	user = store.get("u1")
	assert user.coordinates == Offset(1, 1)
	assert user.radius == 20
	assert user.last_seen == clock.now


@pytest.mark.asyncio
async def test_concurrent_writes_resolve_by_timestamp(store, clock):
	await asyncio.gather(
		store.update_position("u1", Offset(10, 0), 20, timestamp=clock.now + 10),
		store.update_position("u1", Offset(5, 0), 20, timestamp=clock.now + 5),
	)
	assert store.get("u1").coordinates == Offset(10, 0)


@pytest.mark.asyncio
async def test_get_returns_a_copy(store):
	await store.update_position("u1", Offset(0, 0), 20, handle="first")
	copy = store.get("u1")
	copy.handle = "changed"
	assert store.get("u1").handle == "first"


@pytest.mark.asyncio
async def test_users_within_applies_both_radii_and_orders_results(store):
	await store.update_position("a", Offset(0, 0), 20)
	await store.update_position("c", Offset(0, 8), 50)
	await store.update_position("b", Offset(8, 0), 50)
	# Too far for d's own radius
	await store.update_position("d", Offset(15, 0), 10)
	# Beyond the caller's radius even with a wider requested range
	await store.update_position("e", Offset(25, 0), 50)
	await store.update_position("f", Offset(1, 0), 50)
	await store.set_visible("f", False)

	found = store.users_within("a", 50)

	assert [(user.user_id, distance) for user, distance in found] == [("b", 8.0), ("c", 8.0)]
	assert store.users_within("a", 5) == []


@pytest.mark.asyncio
async def test_users_within_never_includes_caller(store):
	await store.update_position("a", Offset(0, 0), 50)
	await store.update_position("b", Offset(0, 0), 50)
	found = store.users_within("a", 50)
	assert [user.user_id for user, _ in found] == ["b"]


@pytest.mark.asyncio
async def test_users_within_uses_haversine_for_geo_points(store):
	await store.update_position("a", GeoPoint(45.5048, -73.5772), 20)
	# ~11 m north
	await store.update_position("b", GeoPoint(45.5049, -73.5772), 20)
	# ~110 m north
	await store.update_position("c", GeoPoint(45.5058, -73.5772), 50)

	found = store.users_within("a", 20)

	assert [user.user_id for user, _ in found] == ["b"]
	assert found[0][1] == pytest.approx(11.12, abs=0.05)


@pytest.mark.asyncio
async def test_users_within_skips_other_coordinate_kinds(store):
	await store.update_position("a", Offset(0, 0), 50)
	await store.update_position("b", GeoPoint(0.0, 0.0), 50)
	assert store.users_within("a", 50) == []


@pytest.mark.asyncio
async def test_unknown_users_raise(store):
	with pytest.raises(UserNotFound):
		store.users_within("ghost", 20)
	with pytest.raises(UserNotFound):
		await store.set_visible("ghost", True)
	with pytest.raises(UserNotFound):
		store.get("ghost")
	with pytest.raises(UserNotFound):
		await store.remove("ghost")


@pytest.mark.asyncio
async def test_stale_users_are_hidden_until_they_broadcast_again(store, clock):
	await store.update_position("a", Offset(0, 0), 50)
	await store.update_position("b", Offset(3, 4), 50)

	clock.advance(61)
	await store.update_position("a", Offset(0, 0), 50)
	assert store.users_within("a", 50) == []

	expired = await store.expire_stale()
	assert expired == ["b"]
	assert not store.get("b").visible
	assert await store.expire_stale() == []

	await store.update_position("b", Offset(3, 4), 50)
	assert store.get("b").visible
	assert [user.user_id for user, _ in store.users_within("a", 50)] == ["b"]


@pytest.mark.asyncio
async def test_broadcast_does_not_override_disabled_discovery(store):
	await store.update_position("a", Offset(0, 0), 50)
	await store.update_position("b", Offset(1, 0), 50)
	await store.set_visible("b", False)
	await store.update_position("b", Offset(2, 0), 50)
	assert not store.get("b").visible
	assert store.users_within("a", 50) == []

	await store.set_visible("b", True)
	assert [user.user_id for user, _ in store.users_within("a", 50)] == ["b"]


@pytest.mark.asyncio
async def test_remove_drops_user(store):
	await store.update_position("a", Offset(0, 0), 50)
	await store.remove("a")
	assert "a" not in store
	assert len(store) == 0
