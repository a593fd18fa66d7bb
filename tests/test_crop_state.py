"""
Unit tests for the crop box state machine.

Covers initial placement, drag and resize rules, clamping, the
incremental-delta model, interaction modes, and layout changes.
"""

import random

import pytest

from meme_maker.config import MIN_CROP_SIZE
from meme_maker.crop_state import CropStateMachine
from meme_maker.models import CropRect, image_bounds


def assert_invariants(sm: CropStateMachine):
    rect = sm.display_rect
    left, top, right, bottom = image_bounds(sm.geometry)
    assert rect.w == rect.h
    assert rect.w >= MIN_CROP_SIZE
    assert rect.x >= left - 1e-9
    assert rect.y >= top - 1e-9
    assert rect.x + rect.w <= right + 1e-9
    assert rect.y + rect.h <= bottom + 1e-9


class TestImageLoad:
    """Tests for on_image_load."""

    def test_initial_crop_is_centered_square(self, letterboxed):
        # 0.8 * min(400, 320) = 256, centered in the image box at y offset 40
        assert letterboxed.display_rect == CropRect(72, 72, 256, 256)
        assert letterboxed.mode == CropStateMachine.MODE_IDLE

    def test_load_emits_source_rect(self, letterboxed, emitted):
        assert emitted == [CropRect(180, 80, 640, 640)]

    def test_zero_rendered_size_is_ignored(self, emitted):
        sm = CropStateMachine(on_change=emitted.append)

        assert not sm.on_image_load((1000, 800), (0, 0), (400, 400))
        assert not sm.is_loaded
        assert sm.source_rect() is None
        assert emitted == []

    def test_reload_resets_crop_and_mode(self, square_400):
        square_400.on_interaction_start((150, 150), "drag")

        square_400.on_image_load((400, 400), (400, 400), (400, 400))

        assert square_400.display_rect == CropRect(40, 40, 320, 320)
        assert square_400.mode == CropStateMachine.MODE_IDLE


class TestDrag:
    """Dragging translates the box and clamps it inside the image."""

    def test_scenario_translate_without_clamp(self, square_400):
        square_400.on_interaction_start((150, 150), "drag")
        square_400.on_interaction_move((170, 155))

        assert square_400.display_rect == CropRect(120, 105, 100, 100)

    def test_clamps_each_axis_independently(self, square_400):
        square_400.on_interaction_start((150, 150), "drag")
        square_400.on_interaction_move((1150, 140))

        assert square_400.display_rect == CropRect(300, 90, 100, 100)

    def test_clamps_to_letterbox_offset(self, letterboxed):
        letterboxed.on_interaction_start((200, 200), "drag")
        letterboxed.on_interaction_move((200, -500))

        assert letterboxed.display_rect.y == 40

    def test_delta_is_incremental_after_clamp(self, square_400):
        square_400.on_interaction_start((150, 150), "drag")
        square_400.on_interaction_move((1150, 150))   # capped at x=300
        square_400.on_interaction_move((1100, 150))   # 50 back from the last pointer

        assert square_400.display_rect.x == 250

    def test_move_emits_source_rect(self, letterboxed, emitted):
        emitted.clear()
        letterboxed.on_interaction_start((200, 200), "drag")
        letterboxed.on_interaction_move((210, 200))

        assert emitted == [CropRect(205, 80, 640, 640)]


class TestResize:
    """Resizing grows both sides by the dominant delta."""

    def test_scenario_clamps_to_image_edge(self, square_400):
        square_400.on_interaction_start((200, 200), "resize")
        square_400.on_interaction_move((700, 210))

        assert square_400.display_rect == CropRect(100, 100, 300, 300)

    def test_horizontal_and_vertical_growth_match(self):
        sizes = []
        for delta in [(40, 0), (0, 40)]:
            sm = CropStateMachine()
            sm.on_image_load((400, 400), (400, 400), (400, 400))
            sm.on_interaction_start((360, 360), "resize")
            sm.on_interaction_move((300, 300))
            sm.on_interaction_move((300 + delta[0], 300 + delta[1]))
            sizes.append(sm.display_rect.w)

        assert sizes[0] == sizes[1] == 300

    def test_diagonal_uses_larger_delta(self, square_400):
        square_400.on_interaction_start((200, 200), "resize")
        square_400.on_interaction_move((230, 210))

        assert square_400.display_rect.w == 130

    def test_minimum_size(self, square_400):
        square_400.on_interaction_start((200, 200), "resize")
        square_400.on_interaction_move((-800, -800))

        assert square_400.display_rect == CropRect(100, 100, MIN_CROP_SIZE, MIN_CROP_SIZE)

    def test_limited_by_nearest_edge(self, letterboxed):
        # box (72, 72, 256): bottom edge of the image is at 360
        letterboxed.on_interaction_start((328, 328), "resize")
        letterboxed.on_interaction_move((428, 328))

        assert letterboxed.display_rect.w == 360 - 72


class TestModes:
    """Interaction start/end bookkeeping."""

    def test_move_while_idle_is_noop(self, square_400, emitted):
        square_400.on_interaction_move((300, 300))

        assert square_400.display_rect == CropRect(100, 100, 100, 100)
        assert emitted == []

    def test_second_start_is_rejected(self, square_400):
        assert square_400.on_interaction_start((150, 150), "drag")
        assert not square_400.on_interaction_start((200, 200), "resize")
        assert square_400.mode == CropStateMachine.MODE_DRAGGING

        square_400.on_interaction_move((160, 150))
        assert square_400.display_rect == CropRect(110, 100, 100, 100)

    def test_end_is_idempotent(self, square_400):
        square_400.on_interaction_start((150, 150), "resize")
        assert square_400.mode == CropStateMachine.MODE_RESIZING

        square_400.on_interaction_end()
        square_400.on_interaction_end()

        assert square_400.mode == CropStateMachine.MODE_IDLE

    def test_start_before_load_is_rejected(self):
        sm = CropStateMachine()

        assert not sm.on_interaction_start((10, 10), "drag")
        assert sm.mode == CropStateMachine.MODE_IDLE

    def test_unknown_kind(self, square_400):
        with pytest.raises(ValueError):
            square_400.on_interaction_start((150, 150), "rotate")


class TestInvariants:
    """Square, minimum size, and containment hold after every move."""

    @pytest.mark.parametrize("seed", range(5))
    def test_random_pointer_sequences(self, letterboxed, seed):
        rng = random.Random(seed)
        for _ in range(20):
            kind = rng.choice(["drag", "resize"])
            pos = (rng.uniform(-100, 500), rng.uniform(-100, 500))
            assert letterboxed.on_interaction_start(pos, kind)
            for _ in range(15):
                pos = (pos[0] + rng.uniform(-120, 120), pos[1] + rng.uniform(-120, 120))
                letterboxed.on_interaction_move(pos)
                assert_invariants(letterboxed)
            letterboxed.on_interaction_end()


class TestLayoutChanges:
    """Container resize and keyboard nudging."""

    def test_container_resize_keeps_source_region(self, letterboxed):
        letterboxed.on_interaction_start((200, 200), "drag")
        letterboxed.on_interaction_move((190, 210))
        letterboxed.on_interaction_end()
        before = letterboxed.source_rect()

        letterboxed.on_container_resize((200, 160), (300, 200))
        after = letterboxed.source_rect()

        assert letterboxed.scale.x == pytest.approx(5.0)
        assert after.x == pytest.approx(before.x)
        assert after.y == pytest.approx(before.y)
        assert after.w == pytest.approx(before.w)
        assert_invariants(letterboxed)

    def test_container_resize_enforces_minimum(self, square_400):
        square_400.on_interaction_start((200, 200), "resize")
        square_400.on_interaction_move((150, 150))   # down to 50
        square_400.on_interaction_end()

        square_400.on_container_resize((200, 200), (200, 200))

        assert_invariants(square_400)

    def test_nudge_clamps(self, square_400):
        assert square_400.nudge(-10, 0)
        assert square_400.display_rect.x == 90

        square_400.nudge(0, 1000)
        assert square_400.display_rect.y == 300

    def test_nudge_ignored_during_interaction(self, square_400):
        square_400.on_interaction_start((150, 150), "drag")

        assert not square_400.nudge(10, 10)
        assert square_400.display_rect == CropRect(100, 100, 100, 100)
