"""
Pytest configuration and fixtures for the print sheet engine tests.

Provides synthetic source photos, default configuration and temporary
directories shared across the test modules.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from PIL import Image, ImageDraw

from photosheet.config import AppConfig, reset_config
from photosheet.models import CropViewport, PhysicalSize, SourceImage, PASSPORT_ASPECT


RED = (220, 20, 20)
BLUE = (20, 20, 220)
GREEN = (20, 200, 20)
YELLOW = (230, 210, 20)


@pytest.fixture(autouse=True)
def clean_global_config():
    """Make sure no test leaks a cached global config into another."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def test_config():
    """Default configuration, independent of any YAML on disk."""
    return AppConfig()


@pytest.fixture
def temp_work_dir():
    """Create a temporary work directory for test processing."""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    shutil.rmtree(temp_dir)


@pytest.fixture
def quadrant_image():
    """
    600x800 photo split into four colored quadrants.

    Top-left red, top-right blue, bottom-left green, bottom-right yellow.
    """
    img = Image.new('RGB', (600, 800), color=RED)
    draw = ImageDraw.Draw(img)
    draw.rectangle([300, 0, 599, 399], fill=BLUE)
    draw.rectangle([0, 400, 299, 799], fill=GREEN)
    draw.rectangle([300, 400, 599, 799], fill=YELLOW)
    return img


@pytest.fixture
def quadrant_source(quadrant_image):
    return SourceImage(quadrant_image)


@pytest.fixture
def solid_source():
    """Uniform color photo, so every rendered pixel has the same value."""
    return SourceImage(Image.new('RGB', (700, 900), color=(10, 120, 200)))


@pytest.fixture
def rgba_source():
    """Photo with a transparent right half."""
    img = Image.new('RGBA', (400, 400), color=(200, 50, 50, 255))
    draw = ImageDraw.Draw(img)
    draw.rectangle([200, 0, 399, 399], fill=(0, 0, 0, 0))
    return SourceImage(img)


@pytest.fixture
def passport_viewport():
    """Untouched viewport with a 35:45 preview box."""
    return CropViewport.for_aspect(PASSPORT_ASPECT)


@pytest.fixture
def paper_4x6():
    return PhysicalSize(101.6, 152.4)


@pytest.fixture
def paper_a4():
    return PhysicalSize(210, 297)


@pytest.fixture
def passport_tile():
    return PhysicalSize(35, 45)
