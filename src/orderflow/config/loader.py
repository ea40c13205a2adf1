"""設定ファイル読み込み"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError, ConfigErrorCodes
from .models import AppConfig

# 環境変数名 -> (セクション, キー, 変換)
_ENV_OVERRIDES: dict[str, tuple[str, str, Any]] = {
    "USERS_BASE_URL": ("users", "base_url", str),
    "HTTP_TIMEOUT_MS": ("users", "timeout_seconds", lambda v: float(v) / 1000),
    "BROKERS": ("broker", "brokers", lambda v: [b.strip() for b in v.split(",") if b.strip()]),
    "EXCHANGE": ("broker", "exchange", str),
    "QUEUE": ("broker", "queue", str),
    "ROUTING_KEY_USER_CREATED": ("broker", "user_created_key", str),
    "ROUTING_KEY_USER_UPDATED": ("broker", "user_updated_key", str),
    "LOG_LEVEL": ("log", "level", str),
}


def merge_layers(*layers: Mapping[str, Any]) -> dict[str, Any]:
    """設定レイヤーを順に重ねた新しい辞書を返す。後のレイヤーが優先。

    セクション（dict）はキー単位で再帰的に重ね、それ以外の値（リスト含む）は置換する。
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(value, Mapping) and isinstance(current, dict):
                merged[key] = merge_layers(current, value)
            elif isinstance(value, Mapping):
                merged[key] = merge_layers(value)
            else:
                merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            code=ConfigErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"Config root must be a mapping: {path}",
        )
    return data


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """環境変数で設定値を上書きした新しい辞書を返す。"""
    overrides: dict[str, Any] = {}
    for name, (section, key, convert) in _ENV_OVERRIDES.items():
        raw = environ.get(name)
        if raw is None or raw == "":
            continue
        try:
            value = convert(raw)
        except ValueError as e:
            raise ConfigError(
                code=ConfigErrorCodes.VALIDATION,
                message=f"Invalid value for {name}: {raw!r}",
                cause=e,
            ) from e
        overrides.setdefault(section, {})[key] = value
    return merge_layers(data, overrides)


def load(
    base_path: Path | None = None,
    env_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """設定を読み込んで AppConfig を返す。

    base_path: ベース設定ファイルパス。省略時はデフォルト値のみ。
    env_path: 環境別設定ファイルパス（オプション）。存在する場合はベースにマージ。
    environ: 上書きに使う環境変数。省略時は os.environ。
    """
    data: dict[str, Any] = _read_yaml(base_path) if base_path is not None else {}
    if env_path is not None and env_path.exists():
        data = merge_layers(data, _read_yaml(env_path))
    data = apply_env_overrides(data, os.environ if environ is None else environ)
    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            code=ConfigErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
