"""Tests for the notification center."""

import pytest

from hivemind.config import Config
from hivemind.notifications import NotificationCenter


@pytest.fixture
def center(clock):
    return NotificationCenter(clock)


def test_notify_uses_default_duration(center, clock):
    notification = center.notify('info', 'Hello', 'world')

    assert notification.created_at_ms == clock()
    assert notification.display_duration_ms == Config.NOTIFICATION_DEFAULT_DURATION_MS
    assert notification.expires_at_ms == clock() + Config.NOTIFICATION_DEFAULT_DURATION_MS
    assert center.to_list()[0]['title'] == 'Hello'


def test_unknown_kind_rejected(center):
    with pytest.raises(ValueError):
        center.notify('shout', 'Hello', 'world')
    assert center.active == []


def test_sweep_removes_only_expired(center, clock):
    center.notify('info', 'short', '', duration_ms=1000)
    center.notify('info', 'long', '', duration_ms=10000)

    clock.advance(999)
    assert center.sweep() == 0
    clock.advance(1)
    assert center.sweep() == 1
    assert [n.title for n in center.active] == ['long']


def test_expired_notification_stays_until_swept(center, clock):
    center.notify('warning', 'stale', '', duration_ms=10)
    clock.advance(100)
    assert len(center.active) == 1
    center.sweep()
    assert center.active == []


def test_dismiss(center):
    first = center.notify('info', 'a', '')
    center.notify('info', 'b', '')

    assert center.dismiss(first.id) is True
    assert center.dismiss(first.id) is False
    assert [n.title for n in center.active] == ['b']


def test_ids_unique_within_one_millisecond(center):
    ids = {center.notify('info', str(i), '').id for i in range(5)}
    assert len(ids) == 5
