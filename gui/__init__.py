"""Qt-bound helpers for hosts that run the touch detector inside a Qt application."""

__all__ = ["QSettingsPersistence", "create_touch_settings_store"]

from .qsettings_adapter import QSettingsPersistence, create_touch_settings_store
