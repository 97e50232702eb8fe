import pytest


async def _place(client, user_id, x, y=0.0, radius=20, **extra):
	response = await client.put(f"/users/{user_id}/position", json={"x": x, "y": y, "radius": radius, **extra})
	assert response.status_code == 200, response.text
	return response.json()


async def _answer(client, user_id, question_id, value, **extra):
	response = await client.post(
		f"/users/{user_id}/answers",
		json={"question_id": question_id, "value": value, **extra},
	)
	assert response.status_code == 201, response.text
	return response.json()


@pytest.mark.asyncio
async def test_position_broadcast_is_accepted(api_client):
	body = await _place(api_client, "alice", 0, handle="al")
	assert body["accepted"] is True
	assert body["visible"] is True
	assert body["radius"] == 20


@pytest.mark.asyncio
async def test_out_of_range_radius_is_rejected(api_client):
	response = await api_client.put("/users/alice/position", json={"x": 0, "y": 0, "radius": 51})
	assert response.status_code == 422
	body = response.json()
	assert body["detail"] == "invalid_radius"
	assert body["request_id"]


@pytest.mark.asyncio
async def test_position_needs_one_representation(api_client):
	response = await api_client.put(
		"/users/alice/position",
		json={"x": 0, "y": 0, "lat": 45.0, "lon": -73.0, "radius": 20},
	)
	assert response.status_code == 422
	assert response.json()["detail"] == "validation_error"


@pytest.mark.asyncio
async def test_answers_for_unknown_question_return_404(api_client):
	response = await api_client.post("/users/alice/answers", json={"question_id": "nope", "value": "x"})
	assert response.status_code == 404
	assert response.json()["detail"] == "unknown_question"


@pytest.mark.asyncio
async def test_answer_response_carries_version(api_client):
	body = await _answer(api_client, "alice", "interests", ["reading", "fitness"])
	assert body["category"] == "interests"
	assert body["value"] == ["reading", "fitness"]
	assert body["version"] > 0


@pytest.mark.asyncio
async def test_matches_join_distance_and_compatibility(api_client):
	await _place(api_client, "alice", 0)
	await _place(api_client, "bob", 8)
	await _answer(api_client, "alice", "interests", "reading,fitness")
	await _answer(api_client, "bob", "interests", "reading,cooking")

	response = await api_client.get("/users/alice/matches", params={"range": 20})

	assert response.status_code == 200
	body = response.json()
	assert body["best_match"] is None
	[item] = body["items"]
	assert item["user_id"] == "bob"
	assert item["distance"] == 8.0
	assert item["score"] == pytest.approx(33.33)
	assert item["level"] == "low"
	assert item["compatibility"]["user_a_id"] == "alice"
	assert item["compatibility"]["highlights"][0]["shared_terms"] == ["reading"]


@pytest.mark.asyncio
async def test_matches_reject_invalid_range(api_client):
	await _place(api_client, "alice", 0)
	response = await api_client.get("/users/alice/matches", params={"range": 51})
	assert response.status_code == 422
	assert response.json()["detail"] == "invalid_radius"


@pytest.mark.asyncio
async def test_matches_for_unknown_user_return_404(api_client):
	response = await api_client.get("/users/ghost/matches")
	assert response.status_code == 404
	assert response.json()["detail"] == "user_not_found"


@pytest.mark.asyncio
async def test_best_match_of_the_day(api_client):
	missing = await api_client.get("/users/alice/best-match")
	assert missing.status_code == 404
	assert missing.json()["detail"] == "no_best_match_today"

	await _place(api_client, "alice", 0)
	await _place(api_client, "bob", 3)
	await _answer(api_client, "alice", "interests", "jazz,chess")
	await _answer(api_client, "bob", "interests", "jazz,chess")
	matches = await api_client.get("/users/alice/matches")
	assert matches.json()["best_match"]["candidate_id"] == "bob"

	response = await api_client.get("/users/alice/best-match")
	assert response.status_code == 200
	body = response.json()
	assert body["candidate_id"] == "bob"
	assert body["score"] == 100.0
	assert body["day"] == "2026-10-18"


@pytest.mark.asyncio
async def test_pass_hides_candidate(api_client):
	await _place(api_client, "alice", 0)
	await _place(api_client, "bob", 3)

	response = await api_client.post("/users/alice/pass/bob")
	assert response.status_code == 200

	assert (await api_client.get("/users/alice/matches")).json()["items"] == []
	assert [item["user_id"] for item in (await api_client.get("/users/bob/matches")).json()["items"]] == ["alice"]

	self_pass = await api_client.post("/users/alice/block/alice")
	assert self_pass.status_code == 400
	assert self_pass.json()["detail"] == "self_interaction"


@pytest.mark.asyncio
async def test_hidden_user_disappears_from_radar(api_client):
	await _place(api_client, "alice", 0)
	await _place(api_client, "bob", 3)

	response = await api_client.put("/users/bob/visibility", json={"visible": False})
	assert response.status_code == 200

	assert (await api_client.get("/users/alice/matches")).json()["items"] == []
	assert (await api_client.put("/users/ghost/visibility", json={"visible": True})).status_code == 404


@pytest.mark.asyncio
async def test_pair_compatibility(api_client):
	await _answer(api_client, "alice", "interests", "reading,fitness")
	await _answer(api_client, "bob", "interests", "reading,cooking")

	response = await api_client.get("/pairs/bob/alice/compatibility")
	assert response.status_code == 200
	body = response.json()
	assert (body["user_a_id"], body["user_b_id"]) == ("bob", "alice")
	assert body["breakdown"] == {"interests": 33.33}
	assert body["version"] > 0

	same = await api_client.get("/pairs/bob/bob/compatibility")
	assert same.status_code == 400
	assert same.json()["detail"] == "self_pair"


@pytest.mark.asyncio
async def test_request_id_is_echoed(api_client):
	response = await api_client.get("/health", headers={"X-Request-Id": "req-123"})
	assert response.status_code == 200
	assert response.headers["X-Request-Id"] == "req-123"


@pytest.mark.asyncio
async def test_health_and_metrics(api_client):
	await _place(api_client, "alice", 0)

	health = await api_client.get("/health")
	assert health.json()["users"] == 1
	assert health.json()["visible"] == 1

	metrics = await api_client.get("/metrics")
	assert metrics.status_code == 200
	assert "icebreaker_position_updates_total" in metrics.text


@pytest.mark.asyncio
async def test_removed_user_leaves_radar_and_cache(api_client, core):
	await _place(api_client, "alice", 0)
	await _place(api_client, "bob", 3)
	await api_client.get("/users/alice/matches")
	assert len(core.cache) == 1

	response = await api_client.delete("/users/bob")
	assert response.status_code == 200

	assert (await api_client.get("/users/alice/matches")).json()["items"] == []
	assert len(core.cache) == 0
	assert (await api_client.delete("/users/bob")).status_code == 404
