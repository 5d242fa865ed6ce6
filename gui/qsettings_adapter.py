"""QSettings-backed persistence adapter for TouchSettings.

Lets the host application keep the touch detector knobs across restarts
while `shared` stays free of PySide6 imports.
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QSettings

from shared.app_settings import SettingsPersistence, TouchSettings, TouchSettingsStore

SETTINGS_GROUP = "touch_detector"


class QSettingsPersistence(SettingsPersistence):
    """QSettings-backed persistence stored under the ``touch_detector`` group."""

    def __init__(
        self,
        organization: str = "SpikeHound",
        application: str = "SpikeHound",
        *,
        qsettings: Optional[QSettings] = None,
    ) -> None:
        self._qsettings = qsettings if qsettings is not None else QSettings(organization, application)
        self._field_names = [f.name for f in TouchSettings.__dataclass_fields__.values()]

    def load(self) -> dict:
        """Load stored values; INI backends return strings, the store coerces them."""
        data = {}
        self._qsettings.beginGroup(SETTINGS_GROUP)
        try:
            for name in self._field_names:
                val = self._qsettings.value(name)
                if val is not None:
                    data[name] = val
        finally:
            self._qsettings.endGroup()
        return data

    def save(self, data: dict) -> None:
        self._qsettings.beginGroup(SETTINGS_GROUP)
        try:
            for key, val in data.items():
                if val is None:
                    self._qsettings.remove(key)
                elif isinstance(val, bool):
                    self._qsettings.setValue(key, int(val))
                else:
                    self._qsettings.setValue(key, val)
        finally:
            self._qsettings.endGroup()
        self._qsettings.sync()


def create_touch_settings_store(qsettings: Optional[QSettings] = None) -> TouchSettingsStore:
    """Factory function to create a settings store with QSettings persistence."""
    return TouchSettingsStore(persistence=QSettingsPersistence(qsettings=qsettings))


__all__ = ["QSettingsPersistence", "SETTINGS_GROUP", "create_touch_settings_store"]
