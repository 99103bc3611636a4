# === FILE: spider_scout/config.py ===
"""
Loading and validation of the SpiderScout crawler configuration.
Pydantic describes the schema; YAML and JSON files are accepted.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Union
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from spider_scout.exceptions import InvalidSeed

__all__ = ("CrawlerConfig", "load_config", "parse_seed")

SinkKind = Literal["none", "json", "http"]
SinkPolicyName = Literal["fatal", "log", "retry"]


class CrawlerConfig(BaseModel):
    """Settings for one crawl. The seed is passed separately."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    workers: int = Field(5, ge=1, description="Number of concurrent fetch workers.")
    delay: float = Field(0.1, ge=0, description="Pause after each fetch, per worker (seconds).")
    timeout: float = Field(10.0, gt=0, description="Timeout of a single fetch (seconds).")
    user_agent: str = Field("SpiderScoutBot/1.0", min_length=1, description="User-Agent header.")
    sink: SinkKind = Field("none", description="Where fetched pages go.")
    sink_endpoint: str = Field(
        "http://localhost:9200/text/article",
        description="Upsert collection URL for the http sink; pages are PUT below it.",
    )
    sink_policy: SinkPolicyName = Field("log", description="Reaction to a failed sink write.")
    sink_retries: int = Field(3, ge=0, description="Extra attempts under the retry policy.")
    report_path: Path = Field(Path("spider_scout_report.json"), description="Output of the json sink.")
    report_content: bool = Field(True, description="Keep raw page bodies in the json report.")

    @field_validator("sink_endpoint", mode="before")
    def _strip_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.rstrip("/")
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
    """
    Read YAML or JSON and return a validated CrawlerConfig.

    Without *path* the optional ``configs/default.yaml`` is used, and plain
    defaults when it does not exist. An explicit missing path raises
    FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return CrawlerConfig(**data)


def parse_seed(raw: str) -> str:
    """Validate the seed address; it must be an absolute http(s) URL."""
    try:
        parts = urlsplit(raw.strip())
        parts.port
    except ValueError as exc:
        raise InvalidSeed(f"Cannot parse seed {raw!r}: {exc}") from exc
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidSeed(f"Seed must be an absolute http(s) URL, got {raw!r}")
    return parts._replace(path=parts.path or "/", fragment="").geturl()
