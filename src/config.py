"""
Configuration management for GCS Live Map

All parameters are configurable and can be overridden via:
1. config/default.yaml
2. Environment variables (prefixed with GCSMAP_)
3. Command line arguments
"""

import logging
import os
import yaml
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class MapConfig:
    """Map surface and overlay configuration"""

    # Initial viewport (Moffett Field)
    center_lat: float = 37.411761
    center_lng: float = -121.994161
    initial_zoom: int = 19

    # Click-to-recenter zooms in to at least this level
    focus_zoom: int = 16

    # Mission/guided/fence colors, indexed by mission number mod len
    palette: List[str] = field(
        default_factory=lambda: ['orange', 'yellow', 'lightblue', 'green', 'red'])

    # Mission path stroke
    mission_path_width: int = 2

    # Mode that hands the vehicle back to its own mission
    autonomous_mode: str = "AUTO"


@dataclass
class AssetsConfig:
    """Icon asset locations"""

    pin_base_url: str = "http://google.com/mapfiles/ms/micons/"
    battery_icon_dir: str = "battery"
    battery_icon_width: int = 21
    battery_icon_height: int = 10

    # Prefix for the vehicle type icons (empty = served next to the page)
    vehicle_icon_base_url: str = ""


@dataclass
class InterfaceConfig:
    """Interface configuration"""

    # REST API
    rest_enabled: bool = True
    rest_host: str = "0.0.0.0"
    rest_port: int = 8080

    # Event journal (empty = disabled)
    journal_dir: str = ""

    # Logging
    log_file: str = ""
    log_level: str = "INFO"


SECTIONS = ('map', 'assets', 'interface')
ENV_PREFIX = "GCSMAP_"


def _coerce(current: Any, value: Any) -> Any:
    """
    Convert a raw value to the type of the field it replaces

    Strings come from the environment and are parsed; YAML values are
    already typed and only need int -> float widening.
    """
    if isinstance(value, str):
        if isinstance(current, bool):
            return value.strip().lower() in ('true', '1', 'yes', 'on')
        if isinstance(current, int):
            return int(value)
        if isinstance(current, float):
            return float(value)
        if isinstance(current, list):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

    if isinstance(current, float) and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


@dataclass
class Config:
    """Main configuration container"""

    map: MapConfig = field(default_factory=MapConfig)
    assets: AssetsConfig = field(default_factory=AssetsConfig)
    interface: InterfaceConfig = field(default_factory=InterfaceConfig)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Build a configuration: defaults, then the YAML file, then GCSMAP_* variables

        A missing file is not an error; the defaults apply.
        """
        config = cls()

        if config_path is None:
            config_path = Path(__file__).parent.parent / "config" / "default.yaml"

        path = Path(config_path)
        if path.exists():
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
            config._apply_mapping(data, source=str(path))
        else:
            logger.debug(f"No configuration file at {path}, using defaults")

        config._apply_env(os.environ)
        return config

    def _set(self, section_name: str, key: str, value: Any, source: str) -> bool:
        section = getattr(self, section_name)
        if key not in {f.name for f in fields(section)}:
            logger.warning(f"{source}: ignoring unknown setting {section_name}.{key}")
            return False
        setattr(section, key, _coerce(getattr(section, key), value))
        return True

    def _apply_mapping(self, data: Dict[str, Any], source: str):
        for section_name, values in data.items():
            if section_name not in SECTIONS or not isinstance(values, dict):
                logger.warning(f"{source}: ignoring unknown section '{section_name}'")
                continue
            for key, value in values.items():
                self._set(section_name, key, value, source)

    def _apply_env(self, environ: Dict[str, str]):
        # GCSMAP_<SECTION>_<KEY>; section names contain no underscore
        for name, value in environ.items():
            if not name.startswith(ENV_PREFIX):
                continue
            section_name, _, key = name[len(ENV_PREFIX):].lower().partition("_")
            if section_name in SECTIONS and key:
                self._set(section_name, key, value, source=name)

    def save(self, config_path: str):
        """Write every section to a YAML file that load() reads back"""
        data = {name: asdict(getattr(self, name)) for name in SECTIONS}
        with open(config_path, 'w') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


# Process-wide configuration, set by the server entry point
_config: Optional[Config] = None


def get_config() -> Config:
    """Current configuration, loading the default file on first use"""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def set_config(config: Optional[Config]):
    global _config
    _config = config
