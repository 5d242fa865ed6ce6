"""Tests for TouchSettings validation and the TouchSettingsStore."""
from __future__ import annotations

import logging

import pytest

from core.touch_detector import TouchDetector
from shared.app_settings import InMemoryPersistence, TouchSettings, TouchSettingsStore
from test.fixtures.stub_models import make_constant_model


class _FailingPersistence:
    def load(self) -> dict:
        return {}

    def save(self, data: dict) -> None:
        raise OSError("disk full")


class TestTouchSettings:

    def test_defaults(self):
        settings = TouchSettings()
        assert settings.enabled is False
        assert settings.threshold == 0.7
        assert settings.cooldown_seconds == 2.0
        assert settings.hop_seconds == 0.5
        settings.validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"threshold": -0.1},
            {"threshold": 1.5},
            {"cooldown_seconds": -1.0},
            {"hop_seconds": 0.0},
            {"hop_seconds": -0.5},
        ],
    )
    def test_validate_rejects(self, kwargs):
        with pytest.raises(ValueError):
            TouchSettings(**kwargs).validate()

    def test_to_dict(self):
        assert TouchSettings(enabled=True).to_dict() == {
            "enabled": True,
            "threshold": 0.7,
            "cooldown_seconds": 2.0,
            "hop_seconds": 0.5,
        }


class TestStoreLoading:

    def test_empty_persistence_gives_defaults(self):
        assert TouchSettingsStore().get() == TouchSettings()

    def test_string_values_are_coerced(self):
        persistence = InMemoryPersistence(
            {"enabled": "true", "threshold": "0.55", "cooldown_seconds": "1", "hop_seconds": "0.25"}
        )
        store = TouchSettingsStore(persistence=persistence)
        assert store.get() == TouchSettings(enabled=True, threshold=0.55, cooldown_seconds=1.0, hop_seconds=0.25)

    @pytest.mark.parametrize("raw, expected", [("1", True), ("0", False), ("off", False), (1, True), (0, False)])
    def test_enabled_coercion(self, raw, expected):
        store = TouchSettingsStore(persistence=InMemoryPersistence({"enabled": raw}))
        assert store.get().enabled is expected

    def test_unreadable_value_falls_back_per_field(self):
        persistence = InMemoryPersistence({"threshold": "high", "cooldown_seconds": 3.0})
        settings = TouchSettingsStore(persistence=persistence).get()
        assert settings.threshold == 0.7
        assert settings.cooldown_seconds == 3.0

    def test_invalid_stored_values_use_defaults(self, caplog):
        persistence = InMemoryPersistence({"threshold": 4.0, "cooldown_seconds": 3.0})
        with caplog.at_level(logging.WARNING, logger="shared.app_settings"):
            store = TouchSettingsStore(persistence=persistence)
        assert store.get() == TouchSettings()
        assert "invalid" in caplog.text

    def test_initial_overrides_persistence(self):
        store = TouchSettingsStore(
            persistence=InMemoryPersistence({"threshold": 0.2}),
            initial=TouchSettings(threshold=0.9),
        )
        assert store.get().threshold == 0.9

    def test_invalid_initial_raises(self):
        with pytest.raises(ValueError):
            TouchSettingsStore(initial=TouchSettings(hop_seconds=0.0))


class TestStoreUpdates:

    def test_update_persists(self):
        persistence = InMemoryPersistence()
        store = TouchSettingsStore(persistence=persistence)

        result = store.update(threshold=0.4, enabled=True)

        assert result == store.get()
        assert store.get().threshold == 0.4
        assert persistence.load()["threshold"] == 0.4
        assert persistence.load()["enabled"] is True
        assert TouchSettingsStore(persistence=persistence).get() == result

    def test_invalid_update_is_rejected(self):
        store = TouchSettingsStore()
        seen = []
        store.subscribe(seen.append, replay=False)

        with pytest.raises(ValueError):
            store.update(threshold=2.0)
        with pytest.raises(TypeError):
            store.update(sensitivity=0.5)

        assert store.get() == TouchSettings()
        assert seen == []

    def test_persistence_failure_is_logged(self, caplog):
        store = TouchSettingsStore(persistence=_FailingPersistence())
        with caplog.at_level(logging.WARNING, logger="shared.app_settings"):
            store.update(threshold=0.3)
        assert store.get().threshold == 0.3
        assert "disk full" in caplog.text


class TestSubscriptions:

    def test_replay_and_notifications(self):
        store = TouchSettingsStore()
        seen = []
        store.subscribe(seen.append)
        store.update(cooldown_seconds=1.0)

        assert [s.cooldown_seconds for s in seen] == [2.0, 1.0]

    def test_no_replay(self):
        store = TouchSettingsStore()
        seen = []
        store.subscribe(seen.append, replay=False)
        assert seen == []

    def test_unsubscribe(self):
        store = TouchSettingsStore()
        seen = []
        unsubscribe = store.subscribe(seen.append, replay=False)
        store.update(threshold=0.6)
        unsubscribe()
        store.update(threshold=0.5)
        unsubscribe()

        assert [s.threshold for s in seen] == [0.6]

    def test_failing_subscriber_does_not_block_others(self):
        store = TouchSettingsStore()

        def broken(_settings):
            raise RuntimeError("boom")

        seen = []
        store.subscribe(broken, replay=False)
        store.subscribe(seen.append, replay=False)
        store.update(enabled=True)

        assert len(seen) == 1
        assert seen[0].enabled

    def test_detector_follows_store(self):
        store = TouchSettingsStore()
        detector = TouchDetector(make_constant_model(0.5), capacity=1000)
        store.subscribe(detector.apply_settings)
        assert detector.get_threshold() == 0.7

        store.update(enabled=True, threshold=0.35, cooldown_seconds=0.5)

        assert detector.is_enabled()
        assert detector.get_threshold() == 0.35
        assert detector.get_cooldown_seconds() == 0.5
