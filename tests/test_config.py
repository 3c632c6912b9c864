"""Tests for the server's default configuration."""

import pytest

from config import CLASSIC_LANDMARKS, _parse_seed, load_game_config
from models.game_state import GameConfig
from models.map import FloorObject


class TestParseSeed:
    """Tests for _parse_seed()."""

    def test_integer(self):
        assert _parse_seed("12345") == 12345

    def test_random_literal(self):
        assert _parse_seed(" Random ") == "random"

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            _parse_seed("banana")


class TestLoadGameConfig:
    """Tests for load_game_config()."""

    def test_defaults(self):
        config = load_game_config()
        assert isinstance(config, GameConfig)
        assert config.grid_size == 31
        assert config.derived_ring_count == 3
        assert config.max_mp == 3
        assert config.start_offset == (4, 6)

    def test_landmarks_loaded(self):
        config = load_game_config()
        assert len(config.landmarks) == len(CLASSIC_LANDMARKS)
        assert config.landmarks[0].floor_object == FloorObject.DOOR_LOCKED
