"""
Tests for the crop rectangle interaction and rasterization.
"""

import pytest
from PIL import Image


class TestPointerDown:
    """Test what a pointer-down grabs."""

    def test_corner_starts_resize(self):
        from edusolver.input.crop import CropInteraction, Handle

        interaction = CropInteraction()

        assert interaction.pointer_down(0.12, 0.11) == Handle.TOP_LEFT
        assert interaction.active_handle == Handle.TOP_LEFT

    def test_each_corner_is_reachable(self):
        from edusolver.input.crop import CropInteraction, Handle

        interaction = CropInteraction()

        assert interaction.hit_test(0.9, 0.1) == Handle.TOP_RIGHT
        assert interaction.hit_test(0.1, 0.9) == Handle.BOTTOM_LEFT
        assert interaction.hit_test(0.9, 0.9) == Handle.BOTTOM_RIGHT

    def test_inside_starts_move(self):
        from edusolver.input.crop import CropInteraction, Handle

        interaction = CropInteraction()

        assert interaction.pointer_down(0.5, 0.5) == Handle.MOVE

    def test_outside_does_nothing(self):
        from edusolver.input.crop import CropInteraction

        interaction = CropInteraction()

        assert interaction.pointer_down(0.0, 0.95) is None
        assert interaction.active_handle is None

    def test_move_without_gesture_is_noop(self):
        from edusolver.input.crop import CropInteraction, CropSelection

        interaction = CropInteraction()
        interaction.pointer_move(0.7, 0.7)

        assert interaction.selection == CropSelection()


class TestResize:
    """Test corner dragging."""

    def test_top_left_drag(self):
        from edusolver.input.crop import CropInteraction

        interaction = CropInteraction()
        interaction.pointer_down(0.1, 0.1)
        sel = interaction.pointer_move(0.2, 0.25)

        assert sel.x == pytest.approx(0.2)
        assert sel.y == pytest.approx(0.25)
        assert sel.w == pytest.approx(0.7)
        assert sel.h == pytest.approx(0.65)

    def test_drag_uses_snapshot_not_previous_step(self):
        """Deltas are measured from pointer-down, not accumulated."""
        from edusolver.input.crop import CropInteraction

        interaction = CropInteraction()
        interaction.pointer_down(0.9, 0.9)
        interaction.pointer_move(0.95, 0.95)
        sel = interaction.pointer_move(0.8, 0.8)

        assert sel.w == pytest.approx(0.7)
        assert sel.h == pytest.approx(0.7)

    def test_minimum_size_keeps_opposite_corner(self):
        from edusolver.input.crop import CropInteraction, MIN_SIZE

        interaction = CropInteraction()
        interaction.pointer_down(0.1, 0.1)
        sel = interaction.pointer_move(0.95, 0.95)

        assert sel.w == pytest.approx(MIN_SIZE)
        assert sel.h == pytest.approx(MIN_SIZE)
        assert sel.right == pytest.approx(0.9)
        assert sel.bottom == pytest.approx(0.9)

    def test_dragged_edge_is_clamped_to_image(self):
        from edusolver.input.crop import CropInteraction

        interaction = CropInteraction()
        interaction.pointer_down(0.9, 0.9)
        sel = interaction.pointer_move(1.5, 1.5)

        assert sel.right == pytest.approx(1.0)
        assert sel.bottom == pytest.approx(1.0)
        assert sel.x == pytest.approx(0.1)

    def test_negative_drag_is_clamped(self):
        from edusolver.input.crop import CropInteraction

        interaction = CropInteraction()
        interaction.pointer_down(0.1, 0.1)
        sel = interaction.pointer_move(-0.5, -0.5)

        assert sel.x == pytest.approx(0.0)
        assert sel.y == pytest.approx(0.0)
        assert sel.w == pytest.approx(0.9)

    def test_selection_stays_valid_through_a_drag(self):
        from edusolver.input.crop import CropInteraction

        interaction = CropInteraction()
        interaction.pointer_down(0.9, 0.1)
        for px, py in [(0.5, 0.5), (0.0, 1.2), (-1.0, -1.0), (2.0, 0.3), (0.12, 0.88)]:
            assert interaction.pointer_move(px, py).is_valid()


class TestMove:
    """Test dragging the whole rectangle."""

    def test_move_translates(self):
        from edusolver.input.crop import CropInteraction

        interaction = CropInteraction()
        interaction.pointer_down(0.5, 0.5)
        sel = interaction.pointer_move(0.55, 0.45)

        assert sel.x == pytest.approx(0.15)
        assert sel.y == pytest.approx(0.05)
        assert sel.w == pytest.approx(0.8)

    def test_move_is_clamped(self):
        from edusolver.input.crop import CropInteraction

        interaction = CropInteraction()
        interaction.pointer_down(0.5, 0.5)
        sel = interaction.pointer_move(0.9, 0.9)

        assert sel.x == pytest.approx(0.2)
        assert sel.y == pytest.approx(0.2)

    def test_pointer_up_ends_gesture(self):
        from edusolver.input.crop import CropInteraction

        interaction = CropInteraction()
        interaction.pointer_down(0.5, 0.5)
        interaction.pointer_up()
        before = interaction.selection
        interaction.pointer_move(0.9, 0.9)

        assert interaction.selection == before


class TestCropImage:
    """Test rasterizing the selection."""

    def test_default_selection_size(self):
        from edusolver.input.crop import CropSelection, crop_image

        image = Image.new("RGB", (200, 100), "white")
        cropped = crop_image(image, CropSelection())

        assert cropped.size == (160, 80)

    def test_tiny_selection_is_at_least_ten_pixels(self):
        from edusolver.input.crop import CropSelection, crop_image

        image = Image.new("RGB", (50, 50), "white")
        cropped = crop_image(image, CropSelection(0.95, 0.95, 0.05, 0.05))

        assert cropped.size == (10, 10)

    def test_box_never_exceeds_small_image(self):
        from edusolver.input.crop import CropSelection

        selection = CropSelection(0.1, 0.1, 0.8, 0.8)

        assert selection.to_pixel_box(5, 4) == (0, 0, 5, 4)
        assert selection.to_pixel_box(5, 40) == (0, 4, 5, 36)

    def test_crop_of_tiny_image_has_no_padding(self):
        from edusolver.input.crop import CropSelection, crop_image

        image = Image.new("RGB", (6, 6), "white")
        cropped = crop_image(image, CropSelection())

        assert cropped.size == (6, 6)
        assert cropped.getpixel((5, 5)) == (255, 255, 255)

    def test_crop_keeps_selected_pixels(self):
        from edusolver.input.crop import CropSelection, crop_image

        image = Image.new("RGB", (100, 100), "white")
        image.paste((255, 0, 0), (50, 50, 100, 100))
        cropped = crop_image(image, CropSelection(0.5, 0.5, 0.5, 0.5))

        assert cropped.getpixel((0, 0)) == (255, 0, 0)


class TestHelpers:
    """Test geometry helpers."""

    def test_fit_size_wide_image(self):
        from edusolver.input.crop import fit_size

        assert fit_size(400, 400, 200, 100) == (400, 200)

    def test_fit_size_tall_image(self):
        from edusolver.input.crop import fit_size

        assert fit_size(400, 400, 100, 200) == (200, 400)

    def test_fit_size_degenerate(self):
        from edusolver.input.crop import fit_size

        assert fit_size(0, 400, 100, 200) == (0.0, 0.0)

    def test_parse_valid(self):
        from edusolver.input.crop import CropSelection

        sel = CropSelection.parse("0.1, 0.2, 0.5, 0.5")

        assert (sel.x, sel.y, sel.w, sel.h) == (0.1, 0.2, 0.5, 0.5)

    @pytest.mark.parametrize("text", ["1,2,3", "a,b,c,d", "0.9,0,0.5,0.5", "0,0,0.01,0.5"])
    def test_parse_invalid(self, text):
        from edusolver.input.crop import CropSelection

        with pytest.raises(ValueError):
            CropSelection.parse(text)
