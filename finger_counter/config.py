"""
Configuration management for the finger counter.
"""
import logging
import math
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.default.yaml"


@dataclass
class MediaPipeConfig:
    """MediaPipe Hands configuration settings, passed through to the detector."""
    max_num_hands: int = 2
    model_complexity: int = 1
    min_detection_confidence: float = 0.6
    min_tracking_confidence: float = 0.5


@dataclass
class ClassifierConfig:
    """Thresholds for deciding whether a finger is raised."""
    thumb_offset: float = 0.05  # horizontal, tip must be left of base by more than this
    finger_offset: float = 0.07  # vertical, tip must be above base by more than this


@dataclass
class DisplayConfig:
    """Display configuration settings."""
    show_landmarks: bool = True
    debug_mode: bool = False
    window_name: str = "Finger Counter"


@dataclass
class Cfg:
    """Main configuration class."""
    mediapipe: MediaPipeConfig = field(default_factory=MediaPipeConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    gestures: Optional[List[Dict[str, Any]]] = None  # custom gesture table entries


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses the packaged config.default.yaml

    Returns:
        Configuration object with all settings

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if a setting is out of range
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    logger.debug(f"Loaded config from {config_path}")
    return _dict_to_config(data)


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' must be a mapping, got {section!r}")
    return section


def _read(section: Dict[str, Any], key: str, default: Any, cast) -> Any:
    """Read one setting, converting it with cast; bad values raise ValueError."""
    value = section.get(key, default)
    if cast is bool:
        if not isinstance(value, bool):
            raise ValueError(f"'{key}' must be true or false, got {value!r}")
        return value
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{key}' must be a {cast.__name__}, got {value!r}") from None


def _dict_to_config(data: Dict[str, Any]) -> Cfg:
    """Convert dictionary to configuration object, filling in defaults."""
    mp_data = _section(data, 'mediapipe')
    defaults = MediaPipeConfig()
    mediapipe = MediaPipeConfig(
        max_num_hands=_read(mp_data, 'max_num_hands', defaults.max_num_hands, int),
        model_complexity=_read(mp_data, 'model_complexity', defaults.model_complexity, int),
        min_detection_confidence=_read(mp_data, 'min_detection_confidence', defaults.min_detection_confidence, float),
        min_tracking_confidence=_read(mp_data, 'min_tracking_confidence', defaults.min_tracking_confidence, float)
    )

    cls_data = _section(data, 'classifier')
    classifier = ClassifierConfig(
        thumb_offset=_read(cls_data, 'thumb_offset', ClassifierConfig.thumb_offset, float),
        finger_offset=_read(cls_data, 'finger_offset', ClassifierConfig.finger_offset, float)
    )

    display_data = _section(data, 'display')
    display = DisplayConfig(
        show_landmarks=_read(display_data, 'show_landmarks', DisplayConfig.show_landmarks, bool),
        debug_mode=_read(display_data, 'debug_mode', DisplayConfig.debug_mode, bool),
        window_name=_read(display_data, 'window_name', DisplayConfig.window_name, str)
    )

    gestures = data.get('gestures')
    if gestures is not None and not isinstance(gestures, list):
        raise ValueError("'gestures' must be a list of gesture definitions")

    cfg = Cfg(
        mediapipe=mediapipe,
        classifier=classifier,
        display=display,
        gestures=gestures
    )
    validate_config(cfg)
    return cfg


def validate_config(cfg: Cfg) -> None:
    """Raise ValueError if any setting is outside its allowed range."""
    mp_cfg = cfg.mediapipe
    if mp_cfg.max_num_hands < 1:
        raise ValueError(f"max_num_hands must be >= 1, got {mp_cfg.max_num_hands}")
    if mp_cfg.model_complexity not in (0, 1):
        raise ValueError(f"model_complexity must be 0 or 1, got {mp_cfg.model_complexity}")
    for name in ('min_detection_confidence', 'min_tracking_confidence'):
        value = getattr(mp_cfg, name)
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{name} must be in [0, 1], got {value}")

    for name in ('thumb_offset', 'finger_offset'):
        value = getattr(cfg.classifier, name)
        if not (math.isfinite(value) and value >= 0.0):
            raise ValueError(f"{name} must be a finite number >= 0, got {value}")
