"""
keystore.py — scope -> base32 secret storage.

The document is a small YAML file:

    version: 1
    scopes:
      default: JBSWY3DPEHPK3PXP
      work: ...

Stores are passed explicitly to the CLI handlers; `MemoryKeyStore` keeps
everything in a dict for tests.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from tiny2fa.errors import StoreIOError, UninitializedScopeError
from tiny2fa.log import logger

CURRENT_VERSION = 1
APP_DIR = "tiny2fa"
CONFIG_FILE = "config.yml"
CONFIG_ENV = "TINY2FA_CONFIG"


def config_dir() -> Path:
    """Per-user configuration directory for the running platform."""
    if sys.platform == "win32":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base)
        return Path.home() / "AppData" / "Roaming"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    base = os.environ.get("XDG_CONFIG_HOME")
    if base and os.path.isabs(base):
        return Path(base)
    return Path.home() / ".config"


def default_config_path() -> Path:
    """$TINY2FA_CONFIG if set, else <config_dir>/tiny2fa/config.yml."""
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return config_dir() / APP_DIR / CONFIG_FILE


class KeyStore:
    """In-memory view of the store document; subclasses decide persistence."""

    def __init__(self, scopes: Optional[Dict[str, str]] = None, version: int = CURRENT_VERSION):
        self.version = version
        self._scopes: Dict[str, str] = dict(scopes or {})

    def load(self) -> "KeyStore":
        return self

    def save(self) -> None:
        pass

    def get(self, scope: str) -> str:
        try:
            return self._scopes[scope]
        except KeyError:
            raise UninitializedScopeError(scope) from None

    def set(self, scope: str, key: str) -> None:
        # not validated here; a bad key surfaces on generate
        self._scopes[scope] = key

    def scopes(self) -> List[str]:
        return sorted(self._scopes)

    def to_document(self) -> dict:
        return {"version": self.version, "scopes": dict(self._scopes)}

    def _apply_document(self, data, source: str) -> None:
        if data is None:
            # empty file
            self.version = CURRENT_VERSION
            self._scopes = {}
            return
        if not isinstance(data, dict):
            raise StoreIOError(f"{source}: expected a mapping at top level")
        version = data.get("version")
        if not isinstance(version, int) or isinstance(version, bool):
            raise StoreIOError(f"{source}: missing or invalid 'version'")
        if version > CURRENT_VERSION:
            raise StoreIOError(f"{source}: unsupported version {version}")
        scopes = data.get("scopes")
        if not isinstance(scopes, dict):
            raise StoreIOError(f"{source}: missing or invalid 'scopes'")
        for name, key in scopes.items():
            if not isinstance(name, str) or not isinstance(key, str):
                raise StoreIOError(f"{source}: scope entries must map strings to strings")
        self.version = version
        self._scopes = dict(scopes)


class MemoryKeyStore(KeyStore):
    """Store that never touches the filesystem. `saves` counts save() calls."""

    def __init__(self, scopes: Optional[Dict[str, str]] = None):
        super().__init__(scopes)
        self.saves = 0

    def save(self) -> None:
        self.saves += 1


class FileKeyStore(KeyStore):
    """YAML-file backed store. Missing file == empty store."""

    def __init__(self, path=None):
        super().__init__()
        self.path = Path(path) if path is not None else default_config_path()

    def load(self) -> "FileKeyStore":
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            logger.debug("No config at %s, starting empty", self.path)
            self.version = CURRENT_VERSION
            self._scopes = {}
            return self
        except OSError as e:
            raise StoreIOError(f"Unable to read {self.path}: {e}") from e
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise StoreIOError(f"Malformed config {self.path}: {e}") from e
        self._apply_document(data, str(self.path))
        logger.debug("Loaded %d scope(s) from %s", len(self._scopes), self.path)
        return self

    def save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_name(self.path.name + ".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                yaml.safe_dump(self.to_document(), f, default_flow_style=False, sort_keys=True)
            # old document stays intact until the new one is complete
            os.replace(tmp, self.path)
        except OSError as e:
            raise StoreIOError(f"Unable to write {self.path}: {e}") from e
        logger.info("Saved config to %s", self.path)
