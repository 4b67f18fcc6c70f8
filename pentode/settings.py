# pentode/settings.py
import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULTS = {
    "home": "gemini://geminiprotocol.net/",
    "network": {"connect_timeout": None, "read_timeout": None, "max_redirects": 5},
    "log": {"level": "WARNING"},
}

def _config_path() -> Path:
    base = Path.home() / ".config" / "pentode"
    base.mkdir(parents=True, exist_ok=True)
    return base / "config.json"

def _merge(defaults: Dict[str, Any], loaded: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged

def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    p = path or _config_path()
    if not p.exists():
        p.write_text(json.dumps(DEFAULTS, indent=2))
        return copy.deepcopy(DEFAULTS)
    # Files written by older versions may miss keys
    return _merge(DEFAULTS, json.loads(p.read_text()))

def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    p = path or _config_path()
    p.write_text(json.dumps(data, indent=2))
