"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from raggy_notes.core.errors import ConfigurationError, SerializationError

ENV_PREFIX = "RAGGY_"
DEFAULT_CONFIG_PATH = Path("~/.config/raggy-notes/config.yaml")

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("notes", "scan_path"): "scan_path",
    ("notes", "extensions"): "note_extensions",
    ("ollama", "host"): "ollama_host",
    ("ollama", "completion_model"): "completion_model",
    ("ollama", "embedding_model"): "embedding_model",
    ("ollama", "embedding_size"): "embedding_size",
    ("qdrant", "url"): "qdrant_url",
    ("qdrant", "collection"): "collection_name",
    ("qdrant", "distance"): "distance",
    ("retrieval", "rag_top_k"): "rag_top_k",
    ("retrieval", "search_top_k"): "search_top_k",
    ("session", "status_clear_seconds"): "status_clear_seconds",
    ("session", "log_path"): "log_path",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    scan_path: Path | None = None
    note_extensions: list[str] = Field(default_factory=lambda: [".md"])
    ollama_host: str = "http://localhost:11434"
    completion_model: str = "deepseek-r1:7b"
    embedding_model: str = "nomic-embed-text"
    embedding_size: int = Field(default=768, gt=0)
    qdrant_url: str = "http://localhost:6333"
    collection_name: str = "private_notes"
    distance: Literal["cosine", "dot", "euclid", "manhattan"] = "cosine"
    rag_top_k: int = Field(default=5, ge=1)
    search_top_k: int = Field(default=10, ge=1)
    status_clear_seconds: float = Field(default=3.0, ge=0)
    log_path: Path = Field(default=Path.home() / ".local" / "state" / "raggy-notes" / "raggy-notes.log")

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @field_validator("scan_path", "log_path", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        if isinstance(value, Path):
            return value.expanduser()
        if isinstance(value, str):
            return Path(value).expanduser()
        raise TypeError("path fields must be a path or string")

    @field_validator("note_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            value = value.split(",")
        extensions = []
        for item in value:
            item = str(item).strip().lower()
            if not item:
                continue
            extensions.append(item if item.startswith(".") else f".{item}")
        return extensions

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            try:
                with config_path.open("r", encoding="utf-8") as fh:
                    raw = yaml.safe_load(fh) or {}
            except yaml.YAMLError as exc:
                raise SerializationError(f"Cannot parse {config_path}: {exc}") from exc
            if not isinstance(raw, Mapping):
                raise SerializationError(f"{config_path} must contain a mapping")
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    def save(self, path: Path | None = None) -> Path:
        """Write the nested YAML form of these settings and return its path."""
        target = (path or self._resolve_config_path(None) or DEFAULT_CONFIG_PATH).expanduser()
        nested: dict[str, dict[str, Any]] = {}
        dumped = self.model_dump(mode="json")
        for (section, key), field_name in _YAML_KEY_MAP.items():
            nested.setdefault(section, {})[key] = dumped[field_name]
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("w", encoding="utf-8") as fh:
                yaml.safe_dump(nested, fh, sort_keys=False)
        except OSError as exc:
            raise ConfigurationError(f"Cannot write {target}: {exc}") from exc
        return target

    def require_scan_path(self) -> Path:
        if self.scan_path is None:
            raise ConfigurationError("No scan path configured. Run 'raggy-notes init --scan-path PATH' first.")
        return self.scan_path

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with RAGGY_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor."""
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings"]
