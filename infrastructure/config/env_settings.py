# infrastructure/config/env_settings.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

from application.steps.gift_chain import GiftChainSettings
from domain.exceptions import ValidationError

# プロジェクトルートの .env
_env_path = Path(__file__).parent.parent.parent / ".env"


def read_env() -> Dict[str, str]:
    """
    .env と環境変数をマージして返す（環境変数が優先）
    """
    values: Dict[str, str] = {}
    if _env_path.exists():
        values.update({k: v for k, v in dotenv_values(_env_path).items() if v is not None})
    values.update(os.environ)
    return values


def _int_value(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(f"{key} must be an integer: {raw!r}") from e


def load_gift_chain_settings(env: Optional[Mapping[str, str]] = None) -> GiftChainSettings:
    env = read_env() if env is None else env
    defaults = GiftChainSettings()
    return GiftChainSettings(
        threshold=_int_value(env, "GIFT_THRESHOLD", defaults.threshold),
        gift_variant_id=_int_value(env, "GIFT_VARIANT_ID", defaults.gift_variant_id),
        attribute_key=env.get("GIFT_ATTRIBUTE_KEY") or defaults.attribute_key,
    )


def load_cart_latency_sec(env: Optional[Mapping[str, str]] = None) -> float:
    env = read_env() if env is None else env
    raw = env.get("CART_LATENCY_SEC")
    if raw is None or not raw.strip():
        return 0.0
    try:
        value = float(raw)
    except ValueError as e:
        raise ValidationError(f"CART_LATENCY_SEC must be a number: {raw!r}") from e
    if value < 0:
        raise ValidationError("CART_LATENCY_SEC must be >= 0")
    return value


def load_log_level(env: Optional[Mapping[str, str]] = None) -> str:
    env = read_env() if env is None else env
    return (env.get("LOG_LEVEL") or "INFO").upper()
