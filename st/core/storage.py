"""Settings storage: the adapter contract the engine consumes, plus in-memory and JSON-file implementations.

The engine only touches storage in ``initialize()`` (load) and ``update_settings()`` (persist).  Adapters
report failures by raising ``StorageError``.
"""

import json
import os
from st.common.logger import log
from st.common.setup import PATHS
from st.core.settings import DEFAULT_SETTINGS, SETTINGS_KEYS, TimerMode
from st.util import now_iso

_SCHEMA_VERSION = 1

SETTINGS_PATH = PATHS.current / "settings.json"


class StorageError(Exception):
    """Raised when settings can't be read from or written to their backing store."""


class StorageAdapter:
    """Contract for a settings store.

    ``get`` returns only the requested keys that are present, ``set`` writes a partial mapping, and
    ``on_changed`` registers a callback fired with ``{key: {"old_value": ..., "new_value": ...}}`` after
    every write.
    """

    def get(self, keys):
        raise NotImplementedError

    def set(self, values):
        raise NotImplementedError

    def on_changed(self, callback):
        raise NotImplementedError


# Shared listener bookkeeping for the concrete adapters.
class _NotifyingStorage(StorageAdapter):

    def __init__(self):
        self._listeners = []

    def on_changed(self, callback):
        self._listeners.append(callback)

    def _notify(self, changes):
        for listener in list(self._listeners):
            listener(changes)


class MemoryStorage(_NotifyingStorage):
    """Plain dict store for tests or when nothing needs to survive a restart."""

    def __init__(self, initial=None):
        super().__init__()
        self._store = dict(initial or {})

    def get(self, keys):
        return {key: self._store[key] for key in keys if key in self._store}

    def set(self, values):
        changes = {}
        for key, value in values.items():
            changes[key] = {"old_value": self._store.get(key), "new_value": value}
            self._store[key] = value
        self._notify(changes)


# Validators for each persisted setting. Anything failing its check gets the default back on load.
def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)

_VALIDATORS = {
    "participants": lambda v: isinstance(v, list) and all(isinstance(p, str) for p in v),
    "total_time": lambda v: _is_number(v) and v > 0,
    "timer_mode": lambda v: v in TimerMode.ALL,
    "host_url": lambda v: isinstance(v, str),
    "show_timer": lambda v: isinstance(v, bool),
}


def default_settings_dict():
    return DEFAULT_SETTINGS.to_dict()


class JsonFileStorage(_NotifyingStorage):
    """Settings persisted in a JSON file under the user's data folder.

    The file looks like ``{"meta": {...}, "settings": {...}}``.  Missing or invalid settings are filled from
    the defaults on load, and a corrupted file falls back to a fresh default set.  Actual I/O failures are
    raised as ``StorageError``.
    """

    def __init__(self, path=None):
        super().__init__()
        self.path = path or SETTINGS_PATH

    # Loads the settings section, filling any defaults and logging what had to be defaulted.
    def load(self):
        if not self.path.exists():
            log.info(f"No existing settings file at '{self.path}', using default settings.")
            return default_settings_dict()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            log.warning(f"Settings file '{self.path}' is corrupted, falling back to default settings.", exc_info=True)
            return default_settings_dict()
        except OSError as e:
            log.error(f"Couldn't read settings file '{self.path}'", exc_info=True)
            raise StorageError(f"Couldn't read settings from '{self.path}': {e}") from e

        settings = data.get("settings") if isinstance(data, dict) else None
        if not isinstance(settings, dict):
            log.warning(f"Settings file '{self.path}' has no settings section, using default settings.")
            return default_settings_dict()

        defaults = default_settings_dict()
        defaulted_values = set()
        for key in SETTINGS_KEYS:
            if key not in settings or not _VALIDATORS[key](settings[key]):
                defaulted_values.add(key)
                settings[key] = defaults[key]

        if defaulted_values:
            log.warning(f"Loaded settings from '{self.path}', but with missing values that were defaulted: "
                        f"{', '.join(sorted(defaulted_values))}")
        else:
            log.info(f"Successfully loaded settings from '{self.path}'.")
        return settings

    def get(self, keys):
        settings = self.load()
        return {key: settings[key] for key in keys if key in settings}

    def set(self, values):
        settings = self.load()
        changes = {}
        for key, value in values.items():
            changes[key] = {"old_value": settings.get(key), "new_value": value}
            settings[key] = value
        self._write(settings)
        self._notify(changes)

    # Writes to a sibling temp file first, then swaps it in, so a failed write never leaves half a file.
    def _write(self, settings):
        data = {
            "meta": {"schema_version": _SCHEMA_VERSION, "saved_at": now_iso()},
            "settings": settings,
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            log.error(f"Couldn't save settings to '{self.path}'", exc_info=True)
            raise StorageError(f"Couldn't save settings to '{self.path}': {e}") from e
        log.info(f"Successfully saved settings to '{self.path}'")
