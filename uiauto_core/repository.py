from __future__ import annotations
import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft202012Validator

from uiauto_core.config import TimeConfig
from uiauto_core.exceptions import ConfigError
from uiauto_core.locators import TargetDescriptor

DEFAULT_SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schemas", "elements.schema.json")


@dataclass(frozen=True)
class AppConfig:
    package: Optional[str] = None
    default_timeout: float = 10.0
    polling_interval: float = 0.2
    artifacts_dir: str = "artifacts"
    timing_preset: str = "default"


class Repository:
    """
    Loads elements.yaml (object map). Provides access to app config, screens
    and target descriptors.
    """

    def __init__(self, path: str, schema_path: Optional[str] = None):
        self.path = os.path.abspath(path)
        self._raw: Dict[str, Any] = self._load_yaml(self.path)
        self._validate_schema(self._raw, schema_path or DEFAULT_SCHEMA_PATH)

        self._app = self._parse_app_config(self._raw.get("app") or {})
        self._screens: Dict[str, Any] = self._raw.get("screens") or {}
        self._targets: Dict[str, Dict[str, Any]] = self._raw.get("targets") or {}
        self._descriptors: Dict[str, TargetDescriptor] = {}
        self._time_config: Optional[TimeConfig] = None

        self._validate()

    @staticmethod
    def _load_yaml(path: str) -> Dict[str, Any]:
        if not os.path.exists(path):
            raise ConfigError(f"Object map YAML not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if not isinstance(data, dict):
                raise ConfigError("Object map YAML must be a mapping at root.")
            return data
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e

    @staticmethod
    def _validate_schema(data: Dict[str, Any], schema_path: str) -> None:
        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
        if errors:
            lines = ["Object map schema validation failed:"]
            for e in errors:
                lines.append(f"- {list(e.path)}: {e.message}")
            raise ConfigError("\n".join(lines))

    @staticmethod
    def _parse_app_config(d: Dict[str, Any]) -> AppConfig:
        return AppConfig(
            package=d.get("package"),
            default_timeout=float(d.get("default_timeout", 10.0)),
            polling_interval=float(d.get("polling_interval", 0.2)),
            artifacts_dir=str(d.get("artifacts_dir", "artifacts")),
            timing_preset=str(d.get("timing_preset", "default")),
        )

    def _validate(self) -> None:
        if self._app.polling_interval > self._app.default_timeout:
            raise ConfigError("app.polling_interval must not exceed app.default_timeout")

        for tname, tspec in self._targets.items():
            screen = tspec.get("screen")
            if screen is not None and screen not in self._screens:
                raise ConfigError(f"targets.{tname}.screen references unknown screen '{screen}'")
            self._descriptors[tname] = TargetDescriptor.from_locators(tname, tspec["locators"])

    @property
    def app(self) -> AppConfig:
        return self._app

    def time_config(self) -> TimeConfig:
        """
        Run-scope timing for this object map: app.timing_preset, with
        app.default_timeout and app.polling_interval applied to the element,
        visibility, enabled and exists waits of the default preset.
        """
        if self._time_config is None:
            self._time_config = TimeConfig.build_from(
                preset=self._app.timing_preset,
                app_defaults={
                    "default_timeout": self._app.default_timeout,
                    "polling_interval": self._app.polling_interval,
                },
            )
        return self._time_config

    @property
    def screens(self) -> List[str]:
        return sorted(self._screens.keys())

    def has_target(self, name: str) -> bool:
        return name in self._descriptors

    def target(self, name: str) -> TargetDescriptor:
        if name not in self._descriptors:
            raise ConfigError(f"Unknown target: {name}")
        return self._descriptors[name]

    def target_screen(self, name: str) -> Optional[str]:
        if name not in self._targets:
            raise ConfigError(f"Unknown target: {name}")
        return self._targets[name].get("screen")

    def list_targets(self, screen: Optional[str] = None) -> List[str]:
        if screen is not None and screen not in self._screens:
            raise ConfigError(f"Unknown screen: {screen}")
        return sorted(
            name for name, spec in self._targets.items()
            if screen is None or spec.get("screen") == screen
        )
