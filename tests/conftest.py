"""
Pytest configuration and shared fixtures for meme crop tool tests.
"""

import os

import pytest
from PIL import Image

from meme_maker.crop_state import CropStateMachine
from meme_maker.models import CropRect


@pytest.fixture
def split_image():
    """
    1000x800 RGBA image: left half red, right half green.

    Returns:
        PIL Image with a vertical color split at x=500
    """
    img = Image.new("RGBA", (1000, 800), (255, 0, 0, 255))
    img.paste((0, 255, 0, 255), (500, 0, 1000, 800))
    return img


@pytest.fixture
def fixed_measure():
    """Text measure where every character is 10 px wide."""
    return lambda s: 10.0 * len(s)


@pytest.fixture
def emitted():
    """List collecting every source rect a state machine emits."""
    return []


@pytest.fixture
def letterboxed(emitted):
    """
    State machine for a 1000x800 image shown at 400x320 in a 400x400 box.

    Scale is (2.5, 2.5) and the image sits 40 px below the container top.
    """
    sm = CropStateMachine(on_change=emitted.append)
    assert sm.on_image_load((1000, 800), (400, 320), (400, 400))
    return sm


@pytest.fixture
def square_400(emitted):
    """
    State machine for a fully visible 400x400 image with the crop box
    moved to (100, 100, 100, 100) through pointer interaction.
    """
    sm = CropStateMachine(on_change=emitted.append)
    assert sm.on_image_load((400, 400), (400, 400), (400, 400))
    # initial box is (40, 40, 320, 320)
    sm.on_interaction_start((360, 360), "resize")
    sm.on_interaction_move((140, 140))
    sm.on_interaction_end()
    sm.on_interaction_start((50, 50), "drag")
    sm.on_interaction_move((110, 110))
    sm.on_interaction_end()
    assert sm.display_rect == CropRect(100, 100, 100, 100)
    emitted.clear()
    return sm


@pytest.fixture(scope="session")
def qapp():
    """Headless QApplication shared by the widget tests."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
