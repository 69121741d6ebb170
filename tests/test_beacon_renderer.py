from __future__ import annotations

import math

import pytest

from jump_beacon.beacon import BeaconInstance, BeaconPhase, BeaconRenderer
from jump_beacon.config import BeaconConfig
from jump_beacon.host import CursorPosition


def make_renderer(host, **options) -> BeaconRenderer:
    return BeaconRenderer(host, BeaconConfig().merge(options))


def test_show_allocates_overlay_timer_and_deadline(host) -> None:
    renderer = make_renderer(host)

    beacon = renderer.show(CursorPosition(12, 4))

    assert beacon is not None
    assert beacon.phase is BeaconPhase.CREATED
    assert beacon.transparency == 0
    overlay = host.overlays[1]
    assert overlay.position == CursorPosition(12, 4)
    assert overlay.width == 40
    assert overlay.style == "#FF6B6B"
    assert len(host.live_timers) == 2
    assert renderer.active == (beacon,)


def test_fade_sequence_runs_to_completion(host) -> None:
    renderer = make_renderer(host, fade_step=8, interval_ms=50, timeout_ms=1000)

    beacon = renderer.show(CursorPosition(3, 0))
    host.advance(1000)

    assert beacon is not None
    assert beacon.history == list(range(0, 97, 8)) + [104]
    assert beacon.ticks == 13
    assert beacon.phase is BeaconPhase.FADED_OUT
    assert host.overlays[1].transparency == list(range(0, 97, 8))
    assert host.overlays[1].close_calls == 1
    assert host.live_timers == []
    assert renderer.active == ()


def test_default_timeout_cuts_fade_short(host) -> None:
    renderer = make_renderer(host)

    beacon = renderer.show(CursorPosition(3, 0))
    host.advance(499)
    assert beacon is not None
    assert beacon.phase is BeaconPhase.FADING

    host.advance(1)

    assert beacon.phase is BeaconPhase.TIMED_OUT
    assert beacon.transparency < 100
    assert host.live_overlays == []
    assert host.live_timers == []


def test_zero_fade_step_is_bounded_by_timeout(host) -> None:
    renderer = make_renderer(host, fade_step=0, timeout_ms=300)

    beacon = renderer.show(CursorPosition(0, 0))
    host.advance(300)

    assert beacon is not None
    assert beacon.phase is BeaconPhase.TIMED_OUT
    assert set(beacon.history) == {0}
    assert host.live_overlays == []
    assert host.live_timers == []


@pytest.mark.parametrize("step", [1, 7, 8, 33, 50, 100, 150])
def test_fade_is_monotonic_and_bounded(host, step: int) -> None:
    renderer = make_renderer(host, fade_step=step, interval_ms=10, timeout_ms=10_000)

    beacon = renderer.show(CursorPosition(0, 0))
    host.advance(10_000)

    assert beacon is not None
    assert beacon.history == sorted(beacon.history)
    assert beacon.ticks <= math.ceil(100 / step)
    assert beacon.phase is BeaconPhase.FADED_OUT


def test_disabled_config_shows_nothing(host) -> None:
    renderer = make_renderer(host, enabled=False)

    assert renderer.show(CursorPosition(5, 0)) is None
    assert host.overlays == {}
    assert host.timers == []


def test_toggle_applies_to_next_show_only(host) -> None:
    renderer = make_renderer(host, fade_step=1, timeout_ms=10_000)
    beacon = renderer.show(CursorPosition(5, 0))

    renderer.config.enabled = False
    host.advance(100)

    assert renderer.show(CursorPosition(6, 0)) is None
    assert beacon is not None
    assert beacon.phase is BeaconPhase.FADING
    assert len(host.live_overlays) == 1


@pytest.mark.parametrize(
    ("length", "requested", "expected"),
    [
        (15, None, 15),
        (3, None, 10),
        (0, None, 10),
        (200, None, 40),
        (30, 5, 5),
        (12, 60, 12),
    ],
)
def test_width_is_clamped_to_line_content(
    make_host, length: int, requested, expected: int
) -> None:
    host = make_host([length])
    renderer = make_renderer(host)

    beacon = renderer.show(CursorPosition(0, 0), requested)

    assert beacon is not None
    assert beacon.width == expected
    assert host.overlays[1].width == expected


def test_width_falls_back_when_line_cannot_be_read(host) -> None:
    host.fail_lines = True
    renderer = make_renderer(host, max_width=25)

    beacon = renderer.show(CursorPosition(2, 0))

    assert beacon is not None
    assert beacon.width == 25


def test_refused_overlay_aborts_without_timers(host) -> None:
    host.refuse_overlays = True
    renderer = make_renderer(host)

    assert renderer.show(CursorPosition(2, 0)) is None
    assert host.timers == []
    assert renderer.active == ()


def test_host_invalidation_stops_timer_without_touching_overlay(host) -> None:
    renderer = make_renderer(host, fade_step=10, timeout_ms=5000)
    beacon = renderer.show(CursorPosition(1, 0))
    host.advance(50)

    host.overlays[1].valid = False
    host.advance(50)

    assert beacon is not None
    assert beacon.phase is BeaconPhase.HOST_INVALIDATED
    assert host.mutations_on_invalid == 0
    assert host.overlays[1].close_calls == 0
    assert host.live_timers == []


def test_release_is_idempotent(host) -> None:
    renderer = make_renderer(host)
    beacon = renderer.show(CursorPosition(1, 0))
    assert beacon is not None
    timer, deadline = beacon.timer, beacon.deadline

    assert renderer.release(beacon, BeaconPhase.FADED_OUT) is True
    assert renderer.release(beacon, BeaconPhase.TIMED_OUT) is False

    assert beacon.phase is BeaconPhase.FADED_OUT
    assert host.overlays[1].close_calls == 1
    assert timer.cancel_calls == 1
    assert deadline.cancel_calls == 1
    assert host.mutations_on_invalid == 0


def test_timeout_after_fade_out_is_a_no_op(host) -> None:
    renderer = make_renderer(host, fade_step=50, interval_ms=10, timeout_ms=500)
    beacon = renderer.show(CursorPosition(1, 0))

    host.advance(30)
    assert beacon is not None
    assert beacon.phase is BeaconPhase.FADED_OUT
    renderer._expire(beacon)

    assert beacon.phase is BeaconPhase.FADED_OUT
    assert host.overlays[1].close_calls == 1


def test_instances_are_independent(host) -> None:
    renderer = make_renderer(host, fade_step=10, interval_ms=50, timeout_ms=5000)
    first = renderer.show(CursorPosition(1, 0))
    second = renderer.show(CursorPosition(40, 0))
    host.advance(100)

    host.overlays[1].valid = False
    host.advance(1000)

    assert first is not None and second is not None
    assert first.phase is BeaconPhase.HOST_INVALIDATED
    assert second.phase is BeaconPhase.FADED_OUT
    assert host.overlays[2].close_calls == 1
    assert host.live_timers == []


def test_show_at_cursor_uses_host_cursor(host) -> None:
    host.cursor = CursorPosition(7, 3)
    renderer = make_renderer(host)

    beacon = renderer.show_at_cursor()

    assert beacon is not None
    assert beacon.position == CursorPosition(7, 3)


def test_show_at_cursor_ignores_host_failure(host) -> None:
    host.fail_cursor = True
    renderer = make_renderer(host)

    assert renderer.show_at_cursor() is None
    assert host.overlays == {}


def test_clear_releases_every_live_beacon(host) -> None:
    renderer = make_renderer(host)
    first = renderer.show(CursorPosition(1, 0))
    second = renderer.show(CursorPosition(30, 0))

    assert renderer.clear() == 2
    assert first is not None and second is not None
    assert first.phase is BeaconPhase.CLEARED
    assert second.phase is BeaconPhase.CLEARED
    assert BeaconPhase.CLEARED.terminal
    assert host.live_overlays == []
    assert host.live_timers == []
    assert renderer.clear() == 0


@pytest.mark.parametrize("refusal", ["refuse_timers", "refuse_deferrals"])
def test_refused_timer_closes_overlay(host, refusal: str) -> None:
    setattr(host, refusal, True)
    renderer = make_renderer(host)

    assert renderer.show(CursorPosition(3, 0)) is None

    assert host.overlays[1].close_calls == 1
    assert host.live_overlays == []
    assert host.live_timers == []
    assert renderer.active == ()
    host.advance(1000)
    assert host.overlays[1].transparency == [0]


def test_active_tracks_instances_by_identity(host) -> None:
    renderer = make_renderer(host)
    beacon = renderer.show(CursorPosition(5, 0))
    assert beacon is not None
    lookalike = BeaconInstance(
        overlay=beacon.overlay,
        position=beacon.position,
        width=beacon.width,
        timer=beacon.timer,
        deadline=beacon.deadline,
        history=list(beacon.history),
    )

    assert lookalike != beacon
    renderer.release(lookalike, BeaconPhase.CLEARED)

    assert renderer.active == (beacon,)
    assert not beacon.released
