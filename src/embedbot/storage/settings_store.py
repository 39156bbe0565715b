"""JSON file backed store for runtime settings and embed policies."""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from ..errors import PersistError
from .models import EmbedPolicy, RuntimeSettings, SettingsKey


logger = logging.getLogger(__name__)

_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


def parse_setting_value(key: SettingsKey, raw: Union[str, bool]) -> Any:
    """
    Convert user input into the value type of a setting.

    Args:
        key: Setting being changed
        raw: Value as typed by the user (or already a bool)

    Returns:
        The typed value

    Raises:
        ValueError: The input is not valid for the setting
    """
    if key is SettingsKey.DO_IMPLICIT_AUTO_EMBED:
        if isinstance(raw, bool):
            return raw
        word = str(raw).strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ValueError("expected boolean")

    value = str(raw).strip()
    if not value:
        raise ValueError("prefix must not be empty")
    return value


class SettingsStore:
    """Owns the runtime settings and the per-scraper embed policies."""

    def __init__(
        self,
        settings_dir: Path,
        default_policies: Optional[dict[str, EmbedPolicy]] = None,
    ):
        """
        Initialize the store.

        Args:
            settings_dir: Directory holding runtime.json and policies/
            default_policies: Policies used when no policy file exists
        """
        self.settings_dir = Path(settings_dir)
        self.runtime_file = self.settings_dir / "runtime.json"
        self.policies_dir = self.settings_dir / "policies"

        self._defaults: dict[str, EmbedPolicy] = dict(default_policies or {})
        self._policies: dict[str, EmbedPolicy] = {}
        self._runtime = RuntimeSettings()
        self._lock = asyncio.Lock()

    @property
    def runtime(self) -> RuntimeSettings:
        return self._runtime

    def load(self) -> None:
        """Read runtime settings and policy files, defaulting what is missing."""
        self._runtime = self._load_document(self.runtime_file, RuntimeSettings) or RuntimeSettings()
        logger.info("Loaded runtime settings: %s", self._runtime.model_dump())

        self._policies = {}
        if self.policies_dir.is_dir():
            for policy_file in sorted(self.policies_dir.glob("*.json")):
                policy = self._load_document(policy_file, EmbedPolicy)
                if policy is not None:
                    self._policies[policy_file.stem] = policy

    def _load_document(self, path: Path, model: type) -> Optional[Any]:
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return model.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.error("Unable to read %s (%s), using defaults", path, e)
            return None

    def _write_document(self, path: Path, data: Any) -> None:
        tmp_path: Optional[Path] = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # a failed write leaves the previous document in place
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as f:
                tmp_path = Path(f.name)
                json.dump(data, f, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise PersistError(f"could not write {path}: {e}") from e

    def read_policy(self, name: str) -> EmbedPolicy:
        """Embed policy for a scraper; empty if none is configured."""
        if name in self._policies:
            return self._policies[name]
        return self._defaults.get(name, EmbedPolicy())

    async def write_policy(self, name: str, policy: EmbedPolicy) -> None:
        """
        Replace a scraper's policy and persist it.

        Raises:
            PersistError: The policy file could not be written. The new
                policy is in effect regardless.
        """
        async with self._lock:
            self._policies[name] = policy
            self._write_document(
                self.policies_dir / f"{name}.json",
                policy.model_dump(mode="json", exclude_none=True),
            )
        logger.info("Updated embed policy of %s", name)

    def get(self, key: SettingsKey) -> Any:
        return getattr(self._runtime, key.field_name)

    async def set(self, key: SettingsKey, raw_value: Union[str, bool]) -> Any:
        """
        Change a runtime setting and persist all runtime settings.

        Args:
            key: Setting to change
            raw_value: New value as typed by the user

        Returns:
            The stored, typed value

        Raises:
            ValueError: raw_value is invalid for the setting
            PersistError: Writing failed. The change is in effect for this
                process regardless.
        """
        value = parse_setting_value(key, raw_value)

        async with self._lock:
            setattr(self._runtime, key.field_name, value)
            logger.info("Setting %s is now %r", key.value, value)
            self._write_document(self.runtime_file, self._runtime.model_dump(mode="json"))

        return value
