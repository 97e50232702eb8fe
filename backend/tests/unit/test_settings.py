import pytest
from pydantic import ValidationError

from icebreaker.settings import Settings


def test_defaults():
	config = Settings()
	assert config.default_visibility_range == 20
	assert config.weight_for("interests") == 1.0
	assert config.priority_of("interests") == 0
	assert config.priority_of("unheard-of") == len(config.category_priority)


def test_weights_from_pairs_env(monkeypatch):
	monkeypatch.setenv("CATEGORY_WEIGHTS", "Interests:2, goals:0.5")
	config = Settings()
	assert config.category_weights == {"interests": 2.0, "goals": 0.5}
	assert config.weight_for("books") == 1.0


def test_weights_from_json_env(monkeypatch):
	monkeypatch.setenv("CATEGORY_WEIGHTS", '{"food": 0, "books": 3}')
	config = Settings()
	assert config.weight_for("food") == 0.0
	assert config.weight_for("books") == 3.0


def test_negative_weight_is_rejected():
	with pytest.raises(ValidationError):
		Settings(category_weights={"food": -1})


def test_priority_from_env(monkeypatch):
	monkeypatch.setenv("CATEGORY_PRIORITY", "Food, books")
	config = Settings()
	assert config.category_priority == ("food", "books")
	assert config.priority_of("books") == 1
	assert config.priority_of("daily") == 2


def test_expiry_window_alias(monkeypatch):
	monkeypatch.setenv("AUTO_EXPIRE_WINDOW", "90")
	assert Settings().auto_expire_seconds == 90.0


@pytest.mark.parametrize("value", ["4", "51"])
def test_default_range_must_be_a_valid_radius(monkeypatch, value):
	monkeypatch.setenv("DEFAULT_VISIBILITY_RANGE", value)
	with pytest.raises(ValidationError):
		Settings()
