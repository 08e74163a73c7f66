"""Software mixer for mono samples with 2D panning and 3D positional audio.

The mixer produces stereo blocks of ``MIX_SAMPLES`` frames at ``AUDIO_RATE`` Hz.
Volume, panning and positions change smoothly through ``Ramp`` values that are
advanced once per mixed block.
"""

from __future__ import annotations

import math
import threading
from typing import Optional

import numpy as np

AUDIO_RATE = 48000
MIX_SAMPLES = 1024
RAMP_STEP = MIX_SAMPLES / AUDIO_RATE
DEFAULT_RAMP = 1.0 / 60.0

_HALF_PI = 0.5 * 3.1415926


def _copy(value):
    if isinstance(value, np.ndarray):
        return value.copy()
    return value


def _vec3(v) -> np.ndarray:
    return np.asarray(v, dtype=float).reshape(3).copy()


class Ramp:
    """A value that moves toward a target over ``ramp`` seconds."""

    def __init__(self, value) -> None:
        self.value = _copy(value)
        self.target = _copy(value)
        self.ramp = 0.0

    def set(self, value, ramp: float) -> None:
        """Set a new target; a ramp of zero or less jumps there at once."""
        if ramp <= 0.0:
            self.value = _copy(value)
            self.target = _copy(value)
            self.ramp = 0.0
        else:
            self.target = _copy(value)
            self.ramp = ramp

    def __repr__(self) -> str:
        return f"Ramp(value={self.value!r}, target={self.target!r}, ramp={self.ramp!r})"


def compute_pan_weights(pan: float) -> tuple[float, float]:
    """Equal-power (left, right) weights for ``pan`` in [-1, 1] (clamped)."""
    pan = max(-1.0, min(1.0, pan))
    ang = _HALF_PI * (0.5 * (pan + 1.0))
    return math.cos(ang), math.sin(ang)


def compute_pan_from_listener_and_position(
    listener_position, listener_right, source_position, source_half_radius
) -> tuple[float, float]:
    """(left, right) gains for a source heard by a listener, with distance falloff.

    Attenuation is 0.5 when the source is ``source_half_radius`` away.
    """
    to = _vec3(source_position) - _vec3(listener_position)
    distance = float(np.linalg.norm(to))
    if distance == 0.0:
        both = math.sqrt(2.0)
        return both, both
    amt = float(np.dot(_vec3(listener_right), to)) / distance
    ang = _HALF_PI * (0.5 * (amt + 1.0))
    ratio = math.inf if source_half_radius == 0.0 else distance / source_half_radius
    att = 1.0 / (1.0 + ratio)
    return math.cos(ang) * att, math.sin(ang) * att


def step_value_ramp(ramp: Ramp) -> None:
    """Advance a scalar ramp by one mix block."""
    if ramp.ramp < RAMP_STEP:
        ramp.value = ramp.target
        ramp.ramp = 0.0
    else:
        ramp.value += (RAMP_STEP / ramp.ramp) * (ramp.target - ramp.value)
        ramp.ramp -= RAMP_STEP


def step_position_ramp(ramp: Ramp) -> None:
    """Advance a 3D position ramp by one mix block (linear interpolation)."""
    if ramp.ramp < RAMP_STEP:
        ramp.value = _copy(ramp.target)
        ramp.ramp = 0.0
    else:
        amt = RAMP_STEP / ramp.ramp
        ramp.value = ramp.value + (ramp.target - ramp.value) * amt
        ramp.ramp -= RAMP_STEP


def step_direction_ramp(ramp: Ramp) -> None:
    """Advance a unit-direction ramp by one mix block, rotating toward the target."""
    if ramp.ramp < RAMP_STEP:
        ramp.value = _copy(ramp.target)
        ramp.ramp = 0.0
        return
    value = np.asarray(ramp.value, dtype=float)
    target = np.asarray(ramp.target, dtype=float)
    norm = np.cross(value, target)
    if not norm.any():
        if target[0] <= target[1] and target[0] <= target[2]:
            norm = np.array([1.0, 0.0, 0.0])
        elif target[1] <= target[2]:
            norm = np.array([0.0, 1.0, 0.0])
        else:
            norm = np.array([0.0, 0.0, 1.0])
        norm = norm - target * float(np.dot(target, norm))
    norm = norm / np.linalg.norm(norm)
    perp = np.cross(norm, target)
    angle = math.acos(max(-1.0, min(1.0, float(np.dot(value, target)))))
    angle *= (ramp.ramp - RAMP_STEP) / ramp.ramp
    ramp.value = target * math.cos(angle) + perp * math.sin(angle)
    ramp.ramp -= RAMP_STEP


class Sample:
    """Mono audio data at 48 kHz, as 32-bit floats."""

    def __init__(self, data) -> None:
        self.data = np.asarray(data, dtype=np.float32).reshape(-1)

    def __len__(self) -> int:
        return len(self.data)


class PlayingSample:
    """Bookkeeping for a sample being played; change it through its methods.

    A sample plays in "2D" mode (panned) when ``pan`` is given, and in "3D" mode
    (positioned relative to the listener) when ``position`` is given.
    """

    def __init__(
        self,
        sample: Sample,
        volume: float,
        loop: bool,
        pan: Optional[float] = None,
        position=None,
        half_volume_radius: float = math.inf,
        lock=None,
    ) -> None:
        if len(sample.data) == 0:
            raise ValueError("cannot play an empty sample")
        if (pan is None) == (position is None):
            raise ValueError("a playing sample needs exactly one of pan or position")
        self.data = sample.data
        self.i = 0
        self.loop = loop
        self.stopping = False
        self.stopped = False
        self.volume = Ramp(float(volume))
        if pan is not None:
            self.pan = Ramp(float(pan))
            self.position = Ramp(np.full(3, math.nan))
            self.half_volume_radius = Ramp(math.nan)
        else:
            self.pan = Ramp(math.nan)
            self.position = Ramp(_vec3(position))
            self.half_volume_radius = Ramp(float(half_volume_radius))
        self._lock = lock if lock is not None else threading.RLock()

    @property
    def is_3d(self) -> bool:
        return math.isnan(self.pan.value)

    def set_volume(self, new_volume: float, ramp: float = DEFAULT_RAMP) -> None:
        with self._lock:
            if not self.stopping:
                self.volume.set(float(new_volume), ramp)

    def set_pan(self, new_pan: float, ramp: float = DEFAULT_RAMP) -> None:
        """Change panning; ignored for 3D samples."""
        if self.is_3d:
            return
        with self._lock:
            self.pan.set(float(new_pan), ramp)

    def set_position(self, new_position, ramp: float = DEFAULT_RAMP) -> None:
        """Change position; ignored for 2D samples."""
        if not self.is_3d:
            return
        with self._lock:
            self.position.set(_vec3(new_position), ramp)

    def set_half_volume_radius(self, new_radius: float, ramp: float = DEFAULT_RAMP) -> None:
        """Change the half-volume radius; ignored for 2D samples."""
        if not self.is_3d:
            return
        with self._lock:
            self.half_volume_radius.set(float(new_radius), ramp)

    def stop(self, ramp: float = DEFAULT_RAMP) -> None:
        """Fade out over ``ramp`` seconds, after which the mixer drops the sample."""
        with self._lock:
            if not (self.stopping or self.stopped):
                self.stopping = True
                self.volume.target = 0.0
                self.volume.ramp = ramp
            else:
                self.volume.ramp = min(self.volume.ramp, ramp)


class Listener:
    """Position and right-hand direction used to pan 3D samples."""

    def __init__(self, lock=None) -> None:
        self.position = Ramp(np.zeros(3))
        self.right = Ramp(np.array([1.0, 0.0, 0.0]))
        self._lock = lock if lock is not None else threading.RLock()

    def set_position_right(self, new_position, new_right, ramp: float = DEFAULT_RAMP) -> None:
        """Move the listener; ``new_right`` is normalized (zero means +x)."""
        with self._lock:
            self.position.set(_vec3(new_position), ramp)
            right = _vec3(new_right)
            if not right.any():
                self.right.set(np.array([1.0, 0.0, 0.0]), ramp)
            else:
                self.right.set(right / np.linalg.norm(right), ramp)


class Mixer:
    """Holds the playing samples and mixes them into stereo blocks."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.volume = Ramp(1.0)
        self.listener = Listener(self._lock)
        self.playing_samples: list[PlayingSample] = []

    @property
    def lock(self):
        """Lock held while mixing; hold it to change sample internals directly."""
        return self._lock

    def _add(self, playing: PlayingSample) -> PlayingSample:
        with self._lock:
            self.playing_samples.append(playing)
        return playing

    def play(self, sample: Sample, volume: float = 1.0, pan: float = 0.0) -> PlayingSample:
        """Play ``sample`` once, panned from -1 (left) to 1 (right)."""
        return self._add(PlayingSample(sample, volume, False, pan=pan, lock=self._lock))

    def play_3d(
        self, sample: Sample, volume: float, position, half_volume_radius: float = math.inf
    ) -> PlayingSample:
        """Play ``sample`` once at a 3D position."""
        return self._add(
            PlayingSample(
                sample, volume, False, position=position,
                half_volume_radius=half_volume_radius, lock=self._lock,
            )
        )

    def loop(self, sample: Sample, volume: float = 1.0, pan: float = 0.0) -> PlayingSample:
        """Play ``sample`` repeatedly until stopped."""
        return self._add(PlayingSample(sample, volume, True, pan=pan, lock=self._lock))

    def loop_3d(
        self, sample: Sample, volume: float, position, half_volume_radius: float = math.inf
    ) -> PlayingSample:
        """Play ``sample`` repeatedly at a 3D position until stopped."""
        return self._add(
            PlayingSample(
                sample, volume, True, position=position,
                half_volume_radius=half_volume_radius, lock=self._lock,
            )
        )

    def stop_all_samples(self) -> None:
        with self._lock:
            for playing in self.playing_samples:
                playing.stop()

    def set_volume(self, new_volume: float, ramp: float = DEFAULT_RAMP) -> None:
        with self._lock:
            self.volume.set(float(new_volume), ramp)

    def _pan_for(self, playing: PlayingSample, position, right) -> np.ndarray:
        if playing.is_3d:
            return np.array(
                compute_pan_from_listener_and_position(
                    position, right, playing.position.value, playing.half_volume_radius.value
                )
            )
        return np.array(compute_pan_weights(playing.pan.value))

    def mix(self) -> np.ndarray:
        """Mix the next block; returns float32 frames of shape (MIX_SAMPLES, 2)."""
        with self._lock:
            buffer = np.zeros((MIX_SAMPLES, 2))

            start_volume = self.volume.value
            start_position = _copy(self.listener.position.value)
            start_right = _copy(self.listener.right.value)

            step_value_ramp(self.volume)
            step_position_ramp(self.listener.position)
            step_direction_ramp(self.listener.right)

            end_volume = self.volume.value
            end_position = self.listener.position.value
            end_right = self.listener.right.value

            still_playing = []
            for playing in self.playing_samples:
                start_pan = self._pan_for(playing, start_position, start_right)
                if playing.is_3d:
                    step_position_ramp(playing.position)
                    step_value_ramp(playing.half_volume_radius)
                else:
                    step_value_ramp(playing.pan)
                start_pan *= start_volume * playing.volume.value

                step_value_ramp(playing.volume)

                end_pan = self._pan_for(playing, end_position, end_right)
                end_pan *= end_volume * playing.volume.value

                pan_step = (end_pan - start_pan) / MIX_SAMPLES

                length = len(playing.data)
                if playing.loop:
                    count = MIX_SAMPLES
                    indices = (playing.i + np.arange(count)) % length
                    next_i = (playing.i + count) % length
                else:
                    count = min(MIX_SAMPLES, length - playing.i)
                    indices = playing.i + np.arange(count)
                    next_i = playing.i + count

                gains = start_pan[np.newaxis, :] + np.arange(count)[:, np.newaxis] * pan_step
                buffer[:count] += gains * playing.data[indices].astype(float)[:, np.newaxis]
                playing.i = next_i

                finished = playing.i >= length or (
                    playing.stopping and playing.volume.value == 0.0
                )
                if finished:
                    playing.stopped = True
                else:
                    still_playing.append(playing)

            self.playing_samples = still_playing
            return buffer.astype(np.float32)