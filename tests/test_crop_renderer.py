import numpy as np

from focuscam.camera import CropRenderer


def quadrant_frame(size: int = 100) -> np.ndarray:
    frame = np.zeros((size, size, 3), dtype=np.uint8)
    half = size // 2
    frame[:half, :half] = 50
    frame[:half, half:] = 100
    frame[half:, :half] = 150
    frame[half:, half:] = 200
    return frame


def test_full_view_returns_frame_unchanged():
    frame = quadrant_frame()
    out = CropRenderer().render(frame, np.zeros(2, dtype=np.float32), 1.0)
    np.testing.assert_array_equal(out, frame)


def test_zoom_on_top_left_quadrant():
    frame = quadrant_frame()
    out = CropRenderer().render(frame, np.zeros(2, dtype=np.float32), 0.5)

    assert out.shape == frame.shape
    assert out[10, 10, 0] == 50
    assert out[80, 80, 0] == 50


def test_pan_selects_bottom_right_quadrant():
    frame = quadrant_frame()
    out = CropRenderer().render(frame, np.array([0.5, 0.5], dtype=np.float32), 0.5)

    assert out[50, 50, 0] == 200
    assert out[5, 5, 0] == 200


def test_pan_x_and_y_are_independent():
    frame = quadrant_frame()
    out = CropRenderer().render(frame, np.array([0.5, 0.0], dtype=np.float32), 0.5)

    # top-right quadrant
    assert out[40, 40, 0] == 100


def test_crop_rect():
    rect = CropRenderer.crop_rect((1080, 1920, 3), np.array([0.25, 0.5], dtype=np.float32), 0.5)
    assert rect == (480, 540, 1440, 1080)

    assert CropRenderer.crop_rect((100, 200), np.zeros(2), 1.0) == (0, 0, 200, 100)


def test_draw_target_does_not_modify_input():
    frame = quadrant_frame()
    original = frame.copy()
    renderer = CropRenderer(draw_target=True)

    out = renderer.render(
        frame,
        np.zeros(2, dtype=np.float32),
        1.0,
        target=(np.array([0.25, 0.25], dtype=np.float32), 0.5)
    )

    np.testing.assert_array_equal(frame, original)
    assert not np.array_equal(out, original)


def test_none_frame():
    assert CropRenderer().render(None, np.zeros(2), 1.0) is None
