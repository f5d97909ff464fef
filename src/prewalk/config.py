from dataclasses import dataclass, field
from pathlib import Path
from typing import NoReturn, TypedDict, cast

import yaml

from .filters import exclude_by_name, exclude_larger_than, skip_errors
from .models import ScanIssue
from .scanner import Scanner


class RawScanConfig(TypedDict):
    targets: list[str]
    excludes: list[str]
    exclude_larger_than: int | None
    ignore_errors: bool


class RawConfigFile(TypedDict):
    config: RawScanConfig


CONFIG_FILENAME: Path = Path("prewalk.yaml")


def type_error(value: object) -> NoReturn:
    raise TypeError(f"Unexpected value of wrong type: {value!r}")


def _string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        type_error(value)

    items: list[object] = cast(list[object], value)
    for item in items:
        if not isinstance(item, str):
            type_error(item)

    return cast(list[str], items)


@dataclass(slots=True)
class ScanConfig:
    targets: list[str]
    excludes: list[str] = field(default_factory=list)
    exclude_larger_than: int | None = None
    ignore_errors: bool = False

    @staticmethod
    def load(path: Path = CONFIG_FILENAME) -> "ScanConfig":
        if not path.exists():
            raise FileNotFoundError(f"Missing config file {path}. Run prewalk init first.")

        with path.open("r", encoding="UTF-8") as f:
            raw_loaded_obj: object | None = cast(object, yaml.safe_load(f))

        if not raw_loaded_obj:
            raise ValueError("Config file is empty or invalid YAML.")

        if not isinstance(raw_loaded_obj, dict):
            type_error(raw_loaded_obj)

        raw_dict: dict[str, object] = cast(dict[str, object], raw_loaded_obj)

        cfg_raw: object | None = raw_dict.get("config")
        if not isinstance(cfg_raw, dict):
            type_error(cfg_raw)

        cfg: dict[str, object] = cast(dict[str, object], cfg_raw)

        limit: object | None = cfg.get("exclude_larger_than")
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int)):
            type_error(limit)

        ignore_errors: object = cfg.get("ignore_errors", False)
        if not isinstance(ignore_errors, bool):
            type_error(ignore_errors)

        return ScanConfig(
            targets=_string_list(cfg.get("targets")),
            excludes=_string_list(cfg.get("excludes", [])),
            exclude_larger_than=cast(int | None, limit),
            ignore_errors=ignore_errors,
        )

    def save(self, path: Path = CONFIG_FILENAME) -> None:
        raw: RawConfigFile = {"config": self.to_raw()}
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(raw, f, sort_keys=False)

    def to_raw(self) -> RawScanConfig:
        return {
            "targets": list(self.targets),
            "excludes": list(self.excludes),
            "exclude_larger_than": self.exclude_larger_than,
            "ignore_errors": self.ignore_errors,
        }

    def apply(self, scanner: Scanner, issues: list[ScanIssue] | None = None) -> None:
        """Install the configured selection and error policies on `scanner`."""
        if self.excludes:
            scanner.select_by_name = exclude_by_name(self.excludes)

        if self.exclude_larger_than is not None:
            scanner.select = exclude_larger_than(self.exclude_larger_than)

        if self.ignore_errors:
            scanner.on_error = skip_errors(issues)
