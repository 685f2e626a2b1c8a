"""
Filesystem facts about the platform installation.

Reads the generated PHP config arrays with regexes rather than executing
them; the files are machine-written and their shape is stable.
"""

from __future__ import annotations

import json
import logging
import re
from functools import cached_property
from pathlib import Path

logger = logging.getLogger(__name__)

_ENABLED_MODULE = re.compile(r"'([A-Za-z0-9]+_[A-Za-z0-9]+)'\s*=>\s*1\b")
_DEPLOY_MODE = re.compile(r"'MAGE_MODE'\s*=>\s*'(\w+)'")
_CLASSMAP_ENTRY = re.compile(r"^\s*'[^']+'\s*=>", re.MULTILINE)


class MagentoProject:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path(self, relative: str) -> Path:
        candidate = Path(relative)
        return candidate if candidate.is_absolute() else self.root / candidate

    def _read(self, relative: str) -> str | None:
        try:
            return self.path(relative).read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return None

    def installed_modules(self) -> list[str]:
        """Enabled module names from app/etc/config.php."""
        content = self._read("app/etc/config.php")
        if content is None:
            return []
        return _ENABLED_MODULE.findall(content)

    def deploy_mode(self) -> str | None:
        content = self._read("app/etc/env.php")
        if content is None:
            return None
        match = _DEPLOY_MODE.search(content)
        return match.group(1) if match else "default"

    @cached_property
    def _composer_lock(self) -> dict:
        content = self._read("composer.lock")
        if content is None:
            return {}
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            logger.warning("composer.lock at %s is not valid JSON", self.root)
            return {}

    def package_version(self, *names: str) -> str | None:
        """Version of the first of `names` found in composer.lock."""
        lock = self._composer_lock
        packages = {
            p.get("name"): p.get("version")
            for p in lock.get("packages", []) + lock.get("packages-dev", [])
        }
        for name in names:
            if packages.get(name):
                return str(packages[name]).lstrip("v")
        return None

    def classmap_entry_count(self) -> int | None:
        content = self._read("vendor/composer/autoload_classmap.php")
        if content is None:
            return None
        return len(_CLASSMAP_ENTRY.findall(content))

    def has_static_loader(self) -> bool:
        return self.path("vendor/composer/autoload_static.php").exists()

    def apcu_autoloader_configured(self) -> bool:
        real = self._read("vendor/composer/autoload_real.php")
        if real is not None and "setApcuPrefix" in real:
            return True
        content = self._read("composer.json")
        if content is None:
            return False
        try:
            config = json.loads(content).get("config", {})
        except json.JSONDecodeError:
            return False
        return bool(config.get("apcu-autoloader"))
