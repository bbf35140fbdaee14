"""
Notifier (toasts)
"""

import pytest

from discovery_canvas.notifications import Notification, NotificationLevel, Notifier


def test_recent_is_bounded():
    notifier = Notifier(max_recent=2)
    for n in range(3):
        notifier.success(f"done {n}")

    assert notifier.messages() == ["done 1", "done 2"]


def test_sink_receives_notifications():
    seen = []
    notifier = Notifier(sink=seen.append)

    notifier.warning("careful")

    assert seen == [Notification(NotificationLevel.WARNING, "careful")]


@pytest.mark.anyio
async def test_track_success():
    notifier = Notifier()

    async def work():
        return 42

    assert await notifier.track(work(), loading="Saving...", success="Saved!", error="Failed.") == 42
    assert [(n.level, n.message) for n in notifier.recent] == [
        (NotificationLevel.LOADING, "Saving..."),
        (NotificationLevel.SUCCESS, "Saved!"),
    ]


@pytest.mark.anyio
async def test_track_failure_reraises():
    notifier = Notifier()

    async def work():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await notifier.track(work(), loading="Saving...", success="Saved!", error="Failed.")

    assert notifier.messages(NotificationLevel.ERROR) == ["Failed."]
    assert notifier.messages(NotificationLevel.SUCCESS) == []
