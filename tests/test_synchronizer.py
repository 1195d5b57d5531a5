"""Tests for frame synchronizers."""

from __future__ import annotations

import numpy as np
import pytest

from astrokernel.core.dates import J2000_EPOCH, AbsoluteDate
from astrokernel.core.errors import ConfigurationError, DataUnavailable
from astrokernel.core.frames import FrameTree, TransformProvider
from astrokernel.core.synchronizer import FrameSynchronizer
from astrokernel.core.transform import Transform


class DriftingProvider(TransformProvider):
    """Translation growing linearly with time; can be told to fail at one date."""

    def __init__(self, speed: float, fail_at: AbsoluteDate = None):
        self.speed = speed
        self.fail_at = fail_at
        self.calls = []

    def get_transform(self, date: AbsoluteDate) -> Transform:
        self.calls.append(date)
        if self.fail_at is not None and date == self.fail_at:
            raise DataUnavailable("no ephemeris", date=str(date))
        t = date.duration_from(AbsoluteDate())
        return Transform.from_translation(date, [self.speed * t, 0.0, 0.0], [self.speed, 0.0, 0.0])


D1 = AbsoluteDate().shifted_by(100.0)
D2 = AbsoluteDate().shifted_by(200.0)
BAD = AbsoluteDate().shifted_by(300.0)


@pytest.fixture
def group():
    tree = FrameTree("inertial")
    sync = FrameSynchronizer(name="spacecraft")
    providers = [DriftingProvider(1.0), DriftingProvider(2.0), DriftingProvider(3.0, fail_at=BAD)]
    body = tree.add_synchronized_frame("body", tree.root, providers[0], sync)
    sensor = tree.add_synchronized_frame("sensor", body, providers[1], sync)
    antenna = tree.add_synchronized_frame("antenna", body, providers[2], sync)
    return tree, sync, providers, (body, sensor, antenna)


def test_default_date() -> None:
    assert FrameSynchronizer().get_date() == J2000_EPOCH


def test_registration_does_not_compute(group) -> None:
    _, sync, providers, frames = group
    assert len(sync) == 3
    assert sync.frames == frames
    assert all(not provider.calls for provider in providers)
    assert all(frame.cached_transform is None for frame in frames)
    assert all(frame.synchronizer is sync for frame in frames)


def test_set_date_updates_every_member(group) -> None:
    _, sync, providers, frames = group
    sync.set_date(D1)
    assert sync.get_date() == D1
    assert all(frame.cached_transform.date == D1 for frame in frames)
    sync.set_date(D2)
    assert sync.get_date() == D2
    for speed, frame in zip((1.0, 2.0, 3.0), frames):
        assert frame.cached_transform.date == D2
        assert np.allclose(frame.cached_transform.translation, [speed * 200.0, 0.0, 0.0])
    assert all(provider.calls == [D1, D2] for provider in providers)


def test_failed_update_leaves_group_untouched(group) -> None:
    _, sync, _, frames = group
    sync.set_date(D1)
    before = [frame.cached_transform for frame in frames]
    with pytest.raises(DataUnavailable):
        sync.set_date(BAD)
    assert sync.get_date() == D1
    assert all(frame.cached_transform is cached for frame, cached in zip(frames, before))


def test_lookup_at_new_date_moves_group(group) -> None:
    tree, sync, providers, (body, sensor, antenna) = group
    sync.set_date(D1)
    transform = sensor.get_transform_to(tree.root, D2)
    assert sync.get_date() == D2
    assert antenna.cached_transform.date == D2
    assert np.allclose(transform.translation, [3.0 * 200.0, 0.0, 0.0])
    # members resolved at D2 are not recomputed again
    assert all(len(provider.calls) == 2 for provider in providers)


def test_lookup_at_group_date_uses_cache(group) -> None:
    tree, sync, providers, (body, _, _) = group
    sync.set_date(D1)
    body.get_transform_to(tree.root, D1)
    assert all(len(provider.calls) == 1 for provider in providers)


def test_duplicate_membership_rejected(group) -> None:
    tree, sync, _, (body, _, _) = group
    with pytest.raises(ConfigurationError):
        sync.add_frame(body)
    with pytest.raises(ConfigurationError):
        FrameSynchronizer(name="other").add_frame(body)
    with pytest.raises(ConfigurationError):
        sync.add_frame(tree.root)
    assert len(sync) == 3
