import json
import logging

from icebreaker.obs.logging import JSONLogFormatter, bind_context, current_request_id, reset_context


def _record(**extra):
	record = logging.LogRecord("icebreaker.test", logging.INFO, __file__, 1, "radar query", None, None)
	for key, value in extra.items():
		setattr(record, key, value)
	return record


def test_positions_and_answers_are_redacted():
	payload = json.loads(
		JSONLogFormatter().format(
			_record(lat=45.5, lon=-73.5, coordinates=(1, 2), answer_value="jazz", latency_ms=1.5, status=200)
		)
	)
	assert payload["lat"] == "[redacted]"
	assert payload["lon"] == "[redacted]"
	assert payload["coordinates"] == "[redacted]"
	assert payload["answer_value"] == "[redacted]"
	assert payload["latency_ms"] == 1.5
	assert payload["status"] == 200


def test_bound_context_is_attached_and_reset():
	tokens = bind_context(request_id="req-1", route="/users/{user_id}/matches", user_id="alice")
	try:
		payload = json.loads(JSONLogFormatter().format(_record()))
		assert payload["request_id"] == "req-1"
		assert payload["route"] == "/users/{user_id}/matches"
		assert payload["user_id"] == "alice"
	finally:
		reset_context(tokens)
	assert current_request_id() == "unknown"
