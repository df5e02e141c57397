"""
설정 로드 + 로깅 설정.

우선순위 (뒤가 이김):
1. DEFAULT_CONFIG (코드 기본값)
2. default.yaml (또는 APP_CONFIG가 가리키는 파일)
3. 환경 변수 (.env 포함): APP_DATABASE_PATH, APP_TEMPLATES_ROOT, APP_LOG_LEVEL
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from src.domain.constants import DEFAULT_MAIN_LAYOUT, DEFAULT_TENANT_ID

PROJECT_ROOT = Path(__file__).parent.parent.parent

DEFAULT_CONFIG: dict[str, Any] = {
    "app": {
        "name": "lokstra-web-examples",
        "version": "1.0.0",
    },
    "render": {
        "templates_root": "templates",
        "main_layout": DEFAULT_MAIN_LAYOUT,
        "use_embedded_fallback": True,
    },
    "database": {
        "path": "data/app.db",
    },
    "tenant": {
        "default_id": DEFAULT_TENANT_ID,
    },
    "logging": {
        "level": "INFO",
    },
}

# 환경 변수 → (section, key)
ENV_OVERRIDES = {
    "APP_DATABASE_PATH": ("database", "path"),
    "APP_TEMPLATES_ROOT": ("render", "templates_root"),
    "APP_LOG_LEVEL": ("logging", "level"),
}

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """중첩 dict 병합 (override 우선)."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    설정 로드.

    Args:
        config_path: YAML 파일 경로 (None이면 APP_CONFIG 또는 루트 default.yaml)

    Returns:
        기본값 + 파일 + 환경 변수가 병합된 설정
    """
    load_dotenv()

    if config_path is None:
        env_path = os.environ.get("APP_CONFIG")
        config_path = Path(env_path) if env_path else PROJECT_ROOT / "default.yaml"

    file_config: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}

    config = merge_config(DEFAULT_CONFIG, file_config)

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config.setdefault(section, {})[key] = value

    return config


def resolve_path(value: str | Path) -> Path:
    """상대 경로는 프로젝트 루트 기준."""
    path = Path(value)
    return path if path.is_absolute() else PROJECT_ROOT / path


def configure_logging(level: str = "INFO") -> None:
    """루트 로거 설정 (uvicorn 로거는 건드리지 않음)."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
