import yaml
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any

logger = logging.getLogger(__name__)

# key: (type, min, max, default)
FILTER_PROPERTIES = {
    'zoom': (float, 1.0, 5.0, 1.0),
    'screen_x': (int, 0, 3840 * 3, 0),
    'screen_y': (int, 0, 3840 * 3, 0),
    'screen_width': (int, 1, 3840 * 3, 1920),
    'screen_height': (int, 1, 3840 * 3, 1080),
    'animation_time': (float, 0.3, 10.0, 0.3),
}


def load_config(config_path: str) -> Dict[str, Any]:
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    return config or {}


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    merged = {}
    for config in configs:
        merged.update(config)
    return merged


def _coerce_property(key: str, raw):
    kind, low, high, default = FILTER_PROPERTIES[key]
    try:
        value = kind(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value for '{key}': {raw!r}, using default {default}")
        return default

    clamped = min(max(value, low), high)
    if clamped != value:
        logger.warning(f"'{key}'={value} out of range [{low}, {high}], clamped to {clamped}")
    return clamped


@dataclass(frozen=True)
class FilterSettings:
    zoom: float = 1.0
    screen_x: int = 0
    screen_y: int = 0
    screen_width: int = 1920
    screen_height: int = 1080
    animation_time: float = 0.3

    def __post_init__(self):
        # clamped however the instance was built
        for key in FILTER_PROPERTIES:
            object.__setattr__(self, key, _coerce_property(key, getattr(self, key)))

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'FilterSettings':
        values = values or {}
        return cls(**{key: values[key] for key in FILTER_PROPERTIES if key in values})

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'FilterSettings':
        """Read the 'filter' section of a merged config."""
        return cls.from_dict(config.get('filter', {}))

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, key) for key in FILTER_PROPERTIES}
