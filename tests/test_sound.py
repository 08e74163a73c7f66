import math

import numpy as np
import pytest

from herdkit.sound import (
    MIX_SAMPLES,
    RAMP_STEP,
    Listener,
    Mixer,
    PlayingSample,
    Ramp,
    Sample,
    compute_pan_from_listener_and_position,
    compute_pan_weights,
    step_direction_ramp,
    step_position_ramp,
    step_value_ramp,
)


def test_pan_weights_center_is_equal_power():
    left, right = compute_pan_weights(0.0)
    assert left == pytest.approx(right)
    assert left * left + right * right == pytest.approx(1.0)


def test_pan_weights_clamped():
    assert compute_pan_weights(5.0) == pytest.approx(compute_pan_weights(1.0))
    left, right = compute_pan_weights(-1.0)
    assert left == pytest.approx(1.0)
    assert right == pytest.approx(0.0, abs=1e-6)


def test_pan_from_position_at_listener():
    left, right = compute_pan_from_listener_and_position(
        (1, 2, 3), (1, 0, 0), (1, 2, 3), 1.0
    )
    assert left == pytest.approx(math.sqrt(2.0))
    assert right == pytest.approx(math.sqrt(2.0))


def test_pan_from_position_half_radius_attenuation():
    left, right = compute_pan_from_listener_and_position(
        (0, 0, 0), (1, 0, 0), (4, 0, 0), 4.0
    )
    assert left == pytest.approx(0.0, abs=1e-6)
    assert right == pytest.approx(0.5)


def test_pan_from_position_infinite_radius_no_attenuation():
    left, right = compute_pan_from_listener_and_position(
        (0, 0, 0), (1, 0, 0), (0, 100, 0), math.inf
    )
    assert left == pytest.approx(right)
    assert left * left + right * right == pytest.approx(1.0)


def test_ramp_set_immediate_and_ramped():
    r = Ramp(1.0)
    r.set(3.0, 0.0)
    assert (r.value, r.target, r.ramp) == (3.0, 3.0, 0.0)
    r.set(5.0, 2.0)
    assert (r.value, r.target, r.ramp) == (3.0, 5.0, 2.0)


def test_step_value_ramp_snaps_when_short():
    r = Ramp(0.0)
    r.set(1.0, RAMP_STEP / 2)
    step_value_ramp(r)
    assert r.value == 1.0
    assert r.ramp == 0.0


def test_step_value_ramp_moves_partway():
    r = Ramp(0.0)
    r.set(1.0, 2 * RAMP_STEP)
    step_value_ramp(r)
    assert r.value == pytest.approx(0.5)
    assert r.ramp == pytest.approx(RAMP_STEP)


def test_step_position_ramp_moves_partway():
    r = Ramp(np.zeros(3))
    r.set(np.array([2.0, 4.0, 6.0]), 2 * RAMP_STEP)
    step_position_ramp(r)
    assert np.allclose(r.value, [1.0, 2.0, 3.0])
    step_position_ramp(r)
    assert np.allclose(r.value, [2.0, 4.0, 6.0])


def test_step_direction_ramp_stays_unit_and_converges():
    r = Ramp(np.array([1.0, 0.0, 0.0]))
    r.set(np.array([0.0, 1.0, 0.0]), 10 * RAMP_STEP)
    before = r.ramp
    step_direction_ramp(r)
    assert np.linalg.norm(r.value) == pytest.approx(1.0)
    assert r.ramp == pytest.approx(before - RAMP_STEP)
    for _ in range(20):
        step_direction_ramp(r)
    assert np.allclose(r.value, [0.0, 1.0, 0.0])
    assert r.ramp == 0.0


def test_step_direction_ramp_opposite_vectors_unit():
    r = Ramp(np.array([1.0, 0.0, 0.0]))
    r.set(np.array([-1.0, 0.0, 0.0]), 4 * RAMP_STEP)
    step_direction_ramp(r)
    assert np.linalg.norm(r.value) == pytest.approx(1.0)


def test_empty_sample_rejected():
    with pytest.raises(ValueError):
        Mixer().play(Sample([]))


def test_play_once_mixes_and_finishes():
    mixer = Mixer()
    playing = mixer.play(Sample(np.ones(10)))
    out = mixer.mix()
    assert out.shape == (MIX_SAMPLES, 2)
    expected = math.cos(math.pi / 4)
    assert np.allclose(out[:10], expected, atol=1e-5)
    assert np.all(out[10:] == 0.0)
    assert playing.stopped
    assert mixer.playing_samples == []


def test_loop_keeps_playing():
    mixer = Mixer()
    playing = mixer.loop(Sample([1.0, 0.0, 0.0]))
    out = mixer.mix()
    assert playing.i == MIX_SAMPLES % 3
    assert playing in mixer.playing_samples
    assert not playing.stopped
    assert out[3, 0] == pytest.approx(out[0, 0])
    assert out[1, 0] == 0.0


def test_stop_removes_sample():
    mixer = Mixer()
    playing = mixer.loop(Sample(np.ones(5)))
    playing.stop(0.0)
    mixer.mix()
    assert playing.stopped
    assert mixer.playing_samples == []


def test_set_volume_ignored_while_stopping():
    mixer = Mixer()
    playing = mixer.loop(Sample(np.ones(5)))
    playing.stop(1.0)
    playing.set_volume(0.7, 0.0)
    assert playing.volume.target == 0.0
    assert playing.stopping


def test_stop_all_samples():
    mixer = Mixer()
    a = mixer.loop(Sample(np.ones(4)))
    b = mixer.play(Sample(np.ones(4)))
    mixer.stop_all_samples()
    assert a.stopping and b.stopping


def test_pan_and_position_respect_mode():
    mixer = Mixer()
    flat = mixer.play(Sample(np.ones(4)), 1.0, 0.0)
    spatial = mixer.play_3d(Sample(np.ones(4)), 1.0, (1.0, 0.0, 0.0))
    flat.set_position((5.0, 5.0, 5.0), 0.0)
    assert np.all(np.isnan(flat.position.value))
    spatial.set_pan(0.5, 0.0)
    assert math.isnan(spatial.pan.value)
    flat.set_pan(0.5, 0.0)
    assert flat.pan.value == 0.5
    spatial.set_position((2.0, 0.0, 0.0), 0.0)
    assert np.allclose(spatial.position.value, [2.0, 0.0, 0.0])


def test_3d_source_on_right_is_louder_right():
    mixer = Mixer()
    mixer.play_3d(Sample(np.ones(MIX_SAMPLES)), 1.0, (10.0, 0.0, 0.0))
    out = mixer.mix()
    assert out[0, 1] > out[0, 0]


def test_global_volume_zero_silences():
    mixer = Mixer()
    mixer.set_volume(0.0, 0.0)
    mixer.play(Sample(np.ones(20)))
    out = mixer.mix()
    assert np.all(out == 0.0)


def test_listener_right_normalized_and_defaulted():
    listener = Listener()
    listener.set_position_right((1, 2, 3), (0, 3, 0), 0.0)
    assert np.allclose(listener.right.value, [0.0, 1.0, 0.0])
    assert np.allclose(listener.position.value, [1.0, 2.0, 3.0])
    listener.set_position_right((0, 0, 0), (0, 0, 0), 0.0)
    assert np.allclose(listener.right.value, [1.0, 0.0, 0.0])


def test_playing_sample_needs_one_mode():
    with pytest.raises(ValueError):
        PlayingSample(Sample([1.0]), 1.0, False)
    with pytest.raises(ValueError):
        PlayingSample(Sample([1.0]), 1.0, False, pan=0.0, position=(0, 0, 0))