"""
Unit tests for the display/source coordinate mapping.
"""

import pytest

from meme_maker.geometry import (
    display_geometry, display_to_source, fit_within, scale_factors, source_to_display,
)
from meme_maker.models import CropRect


class TestFitWithin:
    """Tests for fit_within."""

    def test_scales_down_preserving_aspect(self):
        assert fit_within((1000, 800), (400, 400)) == (400, 320)

    def test_tall_image(self):
        assert fit_within((500, 1000), (400, 400)) == (200, 400)

    def test_never_upscales(self):
        assert fit_within((100, 50), (400, 400)) == (100, 50)

    def test_empty_container(self):
        assert fit_within((1000, 800), (0, 0)) == (0.0, 0.0)


class TestScaleAndOffset:
    """Scale factors and centering offset for the letterboxed layout."""

    def test_scenario_scale_and_offset(self):
        geometry = display_geometry((400, 320), (400, 400))
        scale = scale_factors((1000, 800), (400, 320))

        assert (scale.x, scale.y) == (2.5, 2.5)
        assert (geometry.offset_x, geometry.offset_y) == (0, 40)

    def test_unlaid_out_image_raises(self):
        with pytest.raises(ValueError):
            scale_factors((1000, 800), (0, 320))


class TestTransform:
    """Tests for display_to_source / source_to_display."""

    def setup_method(self):
        self.geometry = display_geometry((400, 320), (400, 400))
        self.scale = scale_factors((1000, 800), (400, 320))

    def test_scenario_display_to_source(self):
        result = display_to_source(CropRect(100, 140, 100, 100), self.geometry, self.scale)
        assert result == CropRect(250, 250, 250, 250)

    @pytest.mark.parametrize("rect", [
        CropRect(0, 0, 1000, 800),
        CropRect(250, 250, 250, 250),
        CropRect(123.4, 56.7, 333.3, 333.3),
        CropRect(999, 799, 1, 1),
    ])
    def test_round_trip(self, rect):
        back = display_to_source(source_to_display(rect, self.geometry, self.scale), self.geometry, self.scale)

        assert back.x == pytest.approx(rect.x)
        assert back.y == pytest.approx(rect.y)
        assert back.w == pytest.approx(rect.w)
        assert back.h == pytest.approx(rect.h)

    def test_no_rounding(self):
        geometry = display_geometry((300, 300), (333, 300))
        scale = scale_factors((1000, 1000), (300, 300))

        result = display_to_source(CropRect(17, 1, 51, 51), geometry, scale)

        assert result.x == pytest.approx((17 - 16.5) * 1000 / 300)
        assert result.w == pytest.approx(170.0)
