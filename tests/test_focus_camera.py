"""
Tests de la cámara de foco: re-encuadre, histéresis y animación.
"""

import numpy as np
import pytest

from focuscam.camera import FocusCamera, ScreenRegion, WindowSnapshot

EPS = 1e-6


def make_camera(zoom_setting: float = 1.0, animation_time: float = 0.3) -> FocusCamera:
    return FocusCamera(
        region=ScreenRegion(0, 0, 1920, 1080),
        zoom_setting=zoom_setting,
        animation_time=animation_time
    )


def test_initial_state_is_settled_full_view():
    camera = make_camera(zoom_setting=3.0)

    pan, zoom = camera.get_current()
    assert camera.progress == 1.0
    assert camera.is_settled
    assert zoom == 1.0
    assert pan.dtype == np.float32
    assert not pan.any()
    assert camera.internal_zoom == pytest.approx(1.0 / 3.0)


def test_scenario_no_zoom_allowed_keeps_full_view():
    camera = make_camera(zoom_setting=1.0)

    snapshot = WindowSnapshot(960, 540, 100, 100)
    assert camera.window_zoom(snapshot) == 1.0

    camera.handle_snapshot(snapshot)
    target, target_zoom = camera.get_target()
    assert target_zoom == 1.0
    assert target[0] == 0.0 and target[1] == 0.0


def test_scenario_zoom_floor_and_edge_clamp():
    camera = make_camera(zoom_setting=5.0)
    snapshot = WindowSnapshot(0, 0, 100, 100)

    # raw ratio 100/1080 + 0.1 ~= 0.1926, below the 0.2 floor
    assert camera.window_zoom(snapshot) == pytest.approx(0.2)

    assert camera.handle_snapshot(snapshot)
    target, target_zoom = camera.get_target()
    assert target_zoom == pytest.approx(0.2)
    assert target[0] == 0.0
    assert target[1] == 0.0
    assert camera.progress == 0.0


def test_centers_window_in_crop():
    camera = make_camera(zoom_setting=5.0)
    snapshot = WindowSnapshot(800, 400, 200, 200)

    window_zoom = camera.window_zoom(snapshot)
    assert window_zoom == pytest.approx(200 / 1080 + 0.1, abs=1e-6)

    camera.handle_snapshot(snapshot)
    target, target_zoom = camera.get_target()
    assert target[0] == pytest.approx(900 / 1920 - 0.5 * window_zoom, abs=1e-6)
    assert target[1] == pytest.approx(500 / 1080 - 0.5 * window_zoom, abs=1e-6)
    assert target_zoom == window_zoom


def test_region_offset_is_subtracted():
    camera = FocusCamera(region=ScreenRegion(1920, 0, 1920, 1080), zoom_setting=5.0)
    snapshot = WindowSnapshot(1920 + 800, 400, 200, 200)

    camera.handle_snapshot(snapshot)
    target, _ = camera.get_target()
    assert target[0] == pytest.approx(900 / 1920 - 0.5 * camera.window_zoom(snapshot), abs=1e-6)


def test_target_pan_never_leaves_screen():
    rng = np.random.default_rng(7)

    for _ in range(500):
        camera = make_camera(zoom_setting=float(rng.uniform(1.0, 5.0)))
        snapshot = WindowSnapshot(
            x=float(rng.uniform(0, 1920)),
            y=float(rng.uniform(0, 1080)),
            width=float(rng.uniform(1, 2500)),
            height=float(rng.uniform(1, 1500))
        )
        window_zoom = camera.window_zoom(snapshot)
        camera.handle_snapshot(snapshot)
        target, target_zoom = camera.get_target()

        assert camera.internal_zoom - EPS <= target_zoom <= 1.0
        assert 0.0 <= target[0] <= 1.0 - window_zoom + EPS
        assert 0.0 <= target[1] <= 1.0 - window_zoom + EPS


def test_same_snapshot_twice_does_not_restart_animation():
    camera = make_camera(zoom_setting=5.0)
    snapshot = WindowSnapshot(800, 400, 200, 200)

    assert camera.handle_snapshot(snapshot)
    camera.advance(0.1)
    progress = camera.progress

    assert not camera.handle_snapshot(snapshot)
    assert camera.progress == progress
    assert camera.get_stats()['suppressed'] == 1
    assert camera.get_stats()['retargets'] == 1


def test_subpixel_jitter_is_ignored():
    camera = make_camera(zoom_setting=5.0)
    camera.handle_snapshot(WindowSnapshot(800, 400, 200, 200))
    camera.advance(1.0)

    # half a pixel moves the target by ~0.00026 of the screen width
    assert not camera.handle_snapshot(WindowSnapshot(800.5, 400, 200, 200))
    assert camera.progress == 1.0

    assert camera.handle_snapshot(WindowSnapshot(820, 400, 200, 200))
    assert camera.progress == 0.0


def test_scenario_leaving_region_mid_flight_returns_to_full_view():
    camera = make_camera(zoom_setting=5.0)
    camera.handle_snapshot(WindowSnapshot(800, 400, 200, 200))
    camera.advance(0.15)

    pan_before, zoom_before = camera.get_current()
    assert 0.0 < camera.progress < 1.0

    assert camera.handle_snapshot(WindowSnapshot(2000, 400, 200, 200))

    target, target_zoom = camera.get_target()
    assert target_zoom == 1.0
    assert not target.any()
    assert camera.progress == 0.0
    assert camera.from_zoom == zoom_before
    np.testing.assert_array_equal(camera.start, pan_before)


def test_scenario_second_off_region_snapshot_is_ignored():
    camera = make_camera(zoom_setting=5.0)
    camera.handle_snapshot(WindowSnapshot(800, 400, 200, 200))
    camera.advance(0.15)
    camera.handle_snapshot(WindowSnapshot(2000, 400, 200, 200))
    camera.advance(0.1)
    progress = camera.progress

    assert not camera.handle_snapshot(WindowSnapshot(-50, 100, 200, 200))
    assert camera.progress == progress
    assert camera.get_target()[1] == 1.0
    assert camera.get_stats()['off_region'] == 2


def test_off_region_keeps_target_pinned_to_corner():
    camera = make_camera(zoom_setting=5.0)
    camera.handle_snapshot(WindowSnapshot(0, 0, 100, 100))
    camera.advance(1.0)

    # a zero pan component counts as resting, so focus leaving is ignored
    assert not camera.handle_snapshot(WindowSnapshot(5000, 0, 100, 100))
    target, target_zoom = camera.get_target()
    assert not target.any()
    assert target_zoom == pytest.approx(0.2)
    assert camera.progress == 1.0
    assert camera.get_stats()['off_region'] == 1


def test_off_region_keeps_target_pinned_to_one_edge():
    camera = make_camera(zoom_setting=5.0)
    camera.handle_snapshot(WindowSnapshot(0, 400, 200, 200))
    camera.advance(1.0)
    target_before, zoom_before = camera.get_target()
    assert target_before[0] == 0.0
    assert target_before[1] > 0.0

    assert not camera.handle_snapshot(WindowSnapshot(2500, 400, 200, 200))
    target, target_zoom = camera.get_target()
    np.testing.assert_array_equal(target, target_before)
    assert target_zoom == zoom_before
    assert camera.progress == 1.0


def test_only_window_origin_decides_off_region():
    camera = make_camera(zoom_setting=5.0)
    camera.handle_snapshot(WindowSnapshot(800, 400, 200, 200))
    camera.advance(1.0)

    # body mostly inside the region but the corner is left of it
    assert camera.handle_snapshot(WindowSnapshot(-10, 100, 1500, 900))
    assert camera.get_target()[1] == 1.0

    # corner inside, body hanging far outside: still on-region
    camera.advance(1.0)
    assert camera.handle_snapshot(WindowSnapshot(1900, 1000, 800, 600))
    assert camera.get_target()[1] < 1.0


def test_region_edges_are_inclusive():
    region = ScreenRegion(0, 0, 1920, 1080)
    assert region.contains_origin(WindowSnapshot(1920, 1080, 10, 10))
    assert region.contains_origin(WindowSnapshot(0, 0, 10, 10))
    assert not region.contains_origin(WindowSnapshot(1921, 0, 10, 10))
    assert not region.contains_origin(WindowSnapshot(0, -1, 10, 10))


def test_progress_advances_with_elapsed_time():
    camera = make_camera(zoom_setting=5.0, animation_time=2.0)
    camera.handle_snapshot(WindowSnapshot(800, 400, 200, 200))

    camera.advance(0.5)
    assert camera.progress == pytest.approx(0.25)

    camera.advance(1.0)
    assert camera.progress == pytest.approx(0.75)

    camera.advance(5.0)
    assert camera.progress == 1.0


def test_halfway_progress_is_halfway_between_from_and_target():
    camera = make_camera(zoom_setting=5.0, animation_time=1.0)
    camera.handle_snapshot(WindowSnapshot(800, 400, 200, 200))
    target, target_zoom = camera.get_target()

    pan, zoom = camera.advance(0.5)
    assert zoom == pytest.approx((1.0 + target_zoom) / 2)
    assert pan[0] == pytest.approx(target[0] / 2, abs=1e-6)


def test_converges_to_target_after_animation_time():
    rng = np.random.default_rng(3)
    camera = make_camera(zoom_setting=4.0, animation_time=0.7)
    camera.handle_snapshot(WindowSnapshot(1200, 300, 300, 250))
    target, target_zoom = camera.get_target()

    elapsed = 0.0
    while elapsed < 0.7:
        dt = float(rng.uniform(0.001, 0.05))
        camera.advance(dt)
        elapsed += dt

    pan, zoom = camera.get_current()
    assert camera.is_settled
    np.testing.assert_allclose(pan, target, atol=1e-6)
    assert zoom == pytest.approx(target_zoom, abs=1e-9)

    # idempotent once converged
    again_pan, again_zoom = camera.advance(0.016)
    np.testing.assert_array_equal(again_pan, pan)
    assert again_zoom == zoom


def test_current_crop_stays_on_screen_while_moving():
    camera = make_camera(zoom_setting=5.0, animation_time=1.0)
    snapshots = [
        WindowSnapshot(1700, 900, 150, 120),
        WindowSnapshot(10, 20, 300, 200),
        WindowSnapshot(900, 500, 600, 400),
        WindowSnapshot(5000, 0, 100, 100),
    ]

    for snapshot in snapshots:
        camera.handle_snapshot(snapshot)
        for _ in range(20):
            pan, zoom = camera.advance(0.03)
            assert camera.internal_zoom - EPS <= zoom <= 1.0 + EPS
            assert 0.0 <= pan.min()
            assert pan.max() <= 1.0 - zoom + EPS


def test_zoom_setting_change_snaps_when_settled():
    camera = make_camera(zoom_setting=1.0)
    camera.advance(0.016)

    camera.set_zoom_setting(2.0)
    assert camera.progress == 1.0
    assert camera.target_zoom == 0.5
    assert camera.internal_zoom == 0.5

    _, zoom = camera.advance(0.016)
    assert zoom == 0.5


def test_zoom_setting_change_mid_flight_keeps_progress():
    camera = make_camera(zoom_setting=5.0)
    camera.handle_snapshot(WindowSnapshot(800, 400, 200, 200))
    camera.advance(0.1)
    progress = camera.progress
    _, current_zoom = camera.get_current()

    camera.set_zoom_setting(3.0)
    assert camera.progress == progress
    assert camera.from_zoom == current_zoom
    assert camera.target_zoom == pytest.approx(1.0 / 3.0)


def test_unchanged_zoom_setting_keeps_target():
    camera = make_camera(zoom_setting=5.0)
    camera.handle_snapshot(WindowSnapshot(800, 400, 200, 200))
    target_zoom = camera.target_zoom

    camera.set_zoom_setting(5.0)
    assert camera.target_zoom == target_zoom


def test_region_change_does_not_reset_animation():
    camera = make_camera(zoom_setting=5.0)
    camera.handle_snapshot(WindowSnapshot(800, 400, 200, 200))
    camera.advance(0.1)
    progress = camera.progress
    target, target_zoom = camera.get_target()

    camera.set_region(ScreenRegion(0, 0, 2560, 1440))
    camera.set_animation_time(1.0)

    assert camera.progress == progress
    np.testing.assert_array_equal(camera.get_target()[0], target)
    assert camera.get_target()[1] == target_zoom


def test_reset_restores_resting_state():
    camera = make_camera(zoom_setting=5.0)
    camera.handle_snapshot(WindowSnapshot(800, 400, 200, 200))
    camera.advance(0.1)

    camera.reset()

    pan, zoom = camera.get_current()
    assert camera.progress == 1.0
    assert zoom == 1.0
    assert not pan.any()
    assert camera.get_stats()['retargets'] == 0
    assert camera.zoom_setting == 5.0
