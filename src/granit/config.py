import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .cipher import MIN_KEY_LENGTH

CONFIG_PATH = Path.home() / ".granit.json"
OUTPUT_FORMATS = ["plain", "fiver"]

ENV_MAPPING: Dict[str, str] = {
    "subkey": "GRANIT_SUBKEY",
    "key1": "GRANIT_KEY1",
    "key2": "GRANIT_KEY2",
    "output_format": "GRANIT_FORMAT",
}


@dataclass
class GranitConfig:
    subkey: str = ""
    key1: str = ""
    key2: str = ""
    output_format: str = "plain"
    min_key_length: int = MIN_KEY_LENGTH

    def to_dict(self) -> Dict[str, object]:
        return {
            "subkey": self.subkey,
            "key1": self.key1,
            "key2": self.key2,
            "output_format": self.output_format,
            "min_key_length": self.min_key_length,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "GranitConfig":
        cfg = cls(
            subkey=str(data.get("subkey", "") or ""),
            key1=str(data.get("key1", "") or ""),
            key2=str(data.get("key2", "") or ""),
            output_format=str(data.get("output_format", "plain") or "plain"),
        )
        if cfg.output_format not in OUTPUT_FORMATS:
            cfg.output_format = OUTPUT_FORMATS[0]
        min_length = data.get("min_key_length")
        if isinstance(min_length, int) and min_length >= 0:
            cfg.min_key_length = min_length
        return cfg


def mask_secret(value: str) -> str:
    """Mask a key for display without leaking it."""
    if not value:
        return ""
    if len(value) <= 4:
        return "*" * len(value)
    return f"{value[:2]}***{value[-2:]}"


def load_config(path: Path = CONFIG_PATH, use_env: bool = True) -> GranitConfig:
    """Load the saved configuration; empty fields fall back to GRANIT_* environment variables."""
    data: Dict[str, object] = {}
    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(loaded, dict):
            data = loaded
    except (OSError, ValueError):
        # Missing or malformed file: defaults/env.
        pass
    if use_env:
        for field_name, env_var in ENV_MAPPING.items():
            if not data.get(field_name):
                data[field_name] = os.getenv(env_var, "")
    return GranitConfig.from_dict(data)


def save_config(config: GranitConfig, path: Path = CONFIG_PATH) -> None:
    payload = config.to_dict()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    try:
        os.chmod(path, 0o600)
    except OSError:
        # Best-effort; ignore on platforms that don't support chmod.
        pass


def resolve_keys(
    config: GranitConfig,
    subkey: Optional[str] = None,
    key1: Optional[str] = None,
    key2: Optional[str] = None,
) -> Dict[str, str]:
    """Explicit keys win over the configured ones."""
    return {
        "subkey": subkey if subkey is not None else config.subkey,
        "key1": key1 if key1 is not None else config.key1,
        "key2": key2 if key2 is not None else config.key2,
    }
