"""Shared pytest fixtures for imagetiler tests."""

import tempfile
from pathlib import Path

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def gradient_image():
    """Provide a 600x400 RGB image with a distinct color per pixel column/row."""
    xs = np.linspace(0, 255, 600, dtype=np.uint8)
    ys = np.linspace(0, 255, 400, dtype=np.uint8)
    xx, yy = np.meshgrid(xs, ys)
    rgb = np.stack([xx, yy, np.full_like(xx, 128)], axis=-1)
    return Image.fromarray(rgb)


@pytest.fixture
def solid_image():
    """Provide a factory for single-color images."""
    def make(width, height, color=(255, 0, 0), mode="RGB"):
        return Image.new(mode, (width, height), color)
    return make


@pytest.fixture
def source_file(temp_dir, gradient_image):
    """Provide the gradient image written as a PNG file."""
    path = temp_dir / "source.png"
    gradient_image.save(path)
    return path


@pytest.fixture
def target_dir(temp_dir):
    """Provide a not yet existing output directory."""
    return temp_dir / "tiles" / "out"
