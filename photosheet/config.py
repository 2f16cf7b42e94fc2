"""
Configuration management for the print sheet composition engine
Loads settings and size presets from YAML files with environment variable overrides
"""

import os
import yaml
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple
from pydantic import BaseModel, Field, ValidationError
from dotenv import load_dotenv
from loguru import logger

from photosheet.errors import InvalidDimensionError
from photosheet.models import PhysicalSize


DEFAULT_CONFIG_DIR = Path("config")


class AppConfig(BaseModel):
    """Main engine configuration"""

    ENV: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/photosheet.log"

    # Layout
    DEFAULT_GAP_MM: float = Field(default=2.0, ge=0.0)
    PREVIEW_BOX_WIDTH_PX: float = Field(default=320.0, gt=0.0)

    # Rendering
    RESAMPLING: Literal["nearest", "bilinear", "bicubic", "lanczos"] = "lanczos"
    BACKGROUND_COLOR: Tuple[int, int, int] = (255, 255, 255)
    DRAW_CROP_MARKS: bool = True
    CROP_MARK_COLOR: Tuple[int, int, int] = (221, 221, 221)  # #ddd
    CROP_MARK_WIDTH_PX: int = Field(default=1, ge=1)

    # Export
    DEFAULT_EXPORT_FORMAT: str = "JPEG"
    JPEG_QUALITY: int = Field(default=95, ge=1, le=100)
    WEBP_QUALITY: int = Field(default=95, ge=1, le=100)
    PNG_COMPRESS_LEVEL: int = Field(default=6, ge=0, le=9)

    # Presets
    PRESETS_FILE: str = "presets.yaml"


class PhotoStandard(BaseModel):
    """Photo size preset (passport/visa standards)"""
    code: str
    name: str
    width_mm: float
    height_mm: float
    label: Optional[str] = None

    @property
    def size(self) -> PhysicalSize:
        return PhysicalSize(self.width_mm, self.height_mm)


class PaperPreset(BaseModel):
    """Paper size preset"""
    code: str
    name: str
    width_mm: float
    height_mm: float

    @property
    def size(self) -> PhysicalSize:
        return PhysicalSize(self.width_mm, self.height_mm)


DEFAULT_PHOTO_STANDARDS: List[Dict] = [
    {'code': 'IN', 'name': 'India (PAN/Passport)', 'width_mm': 35, 'height_mm': 45, 'label': '35 x 45 mm'},
    {'code': 'US', 'name': 'USA (Visa/Passport)', 'width_mm': 51, 'height_mm': 51, 'label': '2 x 2 inch'},
    {'code': 'UK', 'name': 'UK / Europe', 'width_mm': 35, 'height_mm': 45, 'label': '35 x 45 mm'},
]

DEFAULT_PAPERS: List[Dict] = [
    {'code': '4x6', 'name': '4 x 6 inch (Standard)', 'width_mm': 101.6, 'height_mm': 152.4},
    {'code': 'A4', 'name': 'A4 Size', 'width_mm': 210, 'height_mm': 297},
]


def load_yaml_config(file_path) -> Dict:
    """Load configuration from YAML file"""
    path = Path(file_path)
    if not path.exists():
        logger.debug(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading config file {file_path}: {e}")
        return {}


def load_config(environment: str = None, config_dir=None) -> AppConfig:
    """Load configuration with environment-specific overrides"""

    # Pick up a local .env before reading overrides
    load_dotenv()

    environment = environment or os.getenv('PHOTOSHEET_ENV', 'development')
    config_dir = Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR

    base_config = load_yaml_config(config_dir / "settings.yaml")
    env_config = load_yaml_config(config_dir / f"settings_{environment}.yaml")

    # env file overrides base
    config_dict = {**base_config, **env_config}

    env_overrides = {
        'LOG_LEVEL': os.getenv('PHOTOSHEET_LOG_LEVEL'),
        'LOG_FILE': os.getenv('PHOTOSHEET_LOG_FILE'),
        'JPEG_QUALITY': os.getenv('PHOTOSHEET_JPEG_QUALITY'),
    }

    # Only include non-None values
    env_overrides = {k: v for k, v in env_overrides.items() if v is not None}
    config_dict.update(env_overrides)
    config_dict['ENV'] = environment

    try:
        return AppConfig(**config_dict)
    except ValidationError as e:
        logger.error(f"Configuration validation error: {e}")
        # Fall back to defaults
        return AppConfig(ENV=environment)


# Global config instance
_config_instance = None

def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached global configuration (used by tests)"""
    global _config_instance
    _config_instance = None


def _load_preset_group(items: List[Dict], model, group: str) -> Dict:
    presets = {}
    for item in items:
        try:
            preset = model(**item)
            presets[preset.code] = preset
        except ValidationError as e:
            logger.error(f"Error loading {group} preset {item.get('code', 'unknown')}: {e}")
    return presets


def load_presets(config_dir=None, config: AppConfig = None) -> Dict:
    """
    Load photo standard and paper presets.

    Built-in presets are loaded first; entries in the presets YAML file
    with the same code replace them, new codes are added.

    Returns:
        Dict with 'standards' and 'papers', each keyed by preset code
    """
    config = config or get_config()
    config_dir = Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR
    config_data = load_yaml_config(config_dir / config.PRESETS_FILE)

    standards = _load_preset_group(DEFAULT_PHOTO_STANDARDS, PhotoStandard, 'photo standard')
    standards.update(_load_preset_group(config_data.get('standards', []), PhotoStandard, 'photo standard'))

    papers = _load_preset_group(DEFAULT_PAPERS, PaperPreset, 'paper')
    papers.update(_load_preset_group(config_data.get('papers', []), PaperPreset, 'paper'))

    logger.debug(f"Loaded {len(standards)} photo standards and {len(papers)} paper presets")
    return {'standards': standards, 'papers': papers}


def get_photo_standard(code: str, presets: Dict = None) -> PhotoStandard:
    """Look up a photo standard by code"""
    presets = presets or load_presets()
    try:
        return presets['standards'][code]
    except KeyError:
        raise InvalidDimensionError('standard', code, "unknown photo standard")


def get_paper(code: str, presets: Dict = None) -> PaperPreset:
    """Look up a paper preset by code"""
    presets = presets or load_presets()
    try:
        return presets['papers'][code]
    except KeyError:
        raise InvalidDimensionError('paper', code, "unknown paper size")
