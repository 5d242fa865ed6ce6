from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
import threading
from typing import Any, Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TouchSettings:
    enabled: bool = False
    threshold: float = 0.7
    cooldown_seconds: float = 2.0
    hop_seconds: float = 0.5

    def validate(self) -> None:
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError("threshold must be between 0 and 1")
        if self.cooldown_seconds < 0:
            raise ValueError("cooldown_seconds must be non-negative")
        if self.hop_seconds <= 0:
            raise ValueError("hop_seconds must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SettingsPersistence(Protocol):
    """Backend that stores settings as a flat mapping of field name to value."""

    def load(self) -> dict:
        ...

    def save(self, data: dict) -> None:
        ...


class InMemoryPersistence:
    """Headless persistence; values live only as long as the process."""

    def __init__(self, initial: Optional[dict] = None) -> None:
        self._data: dict = dict(initial or {})

    def load(self) -> dict:
        return dict(self._data)

    def save(self, data: dict) -> None:
        self._data.update(data)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "yes", "on"):
            return True
        if text in ("false", "no", "off", ""):
            return False
        return bool(int(text))
    return bool(value)


def _settings_from_mapping(data: dict) -> TouchSettings:
    defaults = TouchSettings()
    values: Dict[str, Any] = {}
    for f in fields(TouchSettings):
        if f.name not in data or data[f.name] is None:
            continue
        raw = data[f.name]
        default = getattr(defaults, f.name)
        try:
            if isinstance(default, bool):
                values[f.name] = _coerce_bool(raw)
            else:
                values[f.name] = float(raw)
        except (TypeError, ValueError):
            logger.debug("Ignoring unreadable setting %s=%r", f.name, raw)
    settings = replace(defaults, **values)
    try:
        settings.validate()
    except ValueError as exc:
        logger.warning("Stored touch settings are invalid (%s); using defaults", exc)
        return defaults
    return settings


class TouchSettingsStore:
    """
    Thread-safe settings container for the touch detector knobs.

    UI code calls `update`, detectors subscribe and receive each new snapshot.
    Every accepted update is written through the persistence backend.
    """

    def __init__(
        self,
        *,
        persistence: Optional[SettingsPersistence] = None,
        initial: Optional[TouchSettings] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._subscribers: Dict[int, Callable[[TouchSettings], None]] = {}
        self._next_token = 0
        self._persistence: SettingsPersistence = persistence or InMemoryPersistence()
        if initial is not None:
            initial.validate()
            self._settings = initial
        else:
            self._settings = _settings_from_mapping(self._persistence.load())

    def get(self) -> TouchSettings:
        with self._lock:
            return self._settings

    def update(self, **kwargs) -> TouchSettings:
        with self._lock:
            new_settings = replace(self._settings, **kwargs)
            new_settings.validate()
            self._settings = new_settings
            callbacks = list(self._subscribers.values())
            self._persist(new_settings)
        for callback in callbacks:
            try:
                callback(new_settings)
            except Exception as exc:
                logger.debug("Touch settings subscriber callback failed: %s", exc)
                continue
        return new_settings

    def subscribe(self, callback: Callable[[TouchSettings], None], *, replay: bool = True) -> Callable[[], None]:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback
            snapshot = self._settings
        if replay:
            callback(snapshot)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def _persist(self, settings: TouchSettings) -> None:
        try:
            self._persistence.save(settings.to_dict())
        except Exception as exc:
            logger.warning("Failed to persist touch settings: %s", exc)


__all__ = [
    "InMemoryPersistence",
    "SettingsPersistence",
    "TouchSettings",
    "TouchSettingsStore",
]
