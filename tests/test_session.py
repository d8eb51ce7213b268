import logging
import math

import numpy as np
import pytest

from clarke_park_lab.config import HISTORY_LENGTH, LabConfig
from clarke_park_lab.history import Domain
from clarke_park_lab.scheduler import ManualScheduler
from clarke_park_lab.session import Session, SimulationState
from clarke_park_lab.transforms import TWO_PI, clarke, park, three_phase

FRAME = 1.0 / 60.0
DOMAINS = ("abc", "alphabeta", "dq")


def frames(count, start=0.0, step=FRAME):
    return [start + i * step for i in range(count)]


@pytest.fixture
def session():
    return Session()


@pytest.fixture
def running(session):
    scheduler = ManualScheduler()
    session.start(scheduler)
    return session, scheduler


def test_initial_state(session):
    assert session.current_state() == SimulationState(
        angle=0.0, speed=1.0, amplitude=1.0, is_playing=True, show_projections=True
    )
    for domain in DOMAINS:
        history = session.history(domain)
        assert len(history) == HISTORY_LENGTH
        assert not np.any(session.history_array(domain))
    assert session.current_park().d == pytest.approx(1.0)


def test_first_tick_records_baseline_then_advances(running):
    session, scheduler = running
    scheduler.fire(5.0)
    assert session.current_state().angle == 0.0
    scheduler.fire(5.25)
    assert session.current_state().angle == pytest.approx(math.pi / 2)


def test_tick_records_one_sample_per_domain(running):
    session, scheduler = running
    scheduler.run([0.0, 0.1])
    angle = session.current_state().angle
    phase = three_phase(angle, 1.0)
    assert session.history(Domain.ABC)[0] == pytest.approx(tuple(phase))
    assert session.history(Domain.ALPHABETA)[0] == pytest.approx(tuple(clarke(phase)))
    assert session.history(Domain.DQ)[0] == pytest.approx(tuple(park(clarke(phase), angle)))
    assert session.current_phase() == phase


def test_domains_share_the_tick_angle(running):
    session, scheduler = running
    scheduler.run(frames(90))
    for abc, ab, dq in zip(*(session.history(d)[:89] for d in DOMAINS)):
        # alpha/beta and d give back the angle that produced the abc sample
        theta = math.atan2(ab[1], ab[0])
        assert tuple(clarke(abc)) == pytest.approx(ab, abs=1e-12)
        assert tuple(park(clarke(abc), theta)) == pytest.approx(dq, abs=1e-9)


def test_park_history_is_constant_while_running(running):
    session, scheduler = running
    session.set_amplitude(0.8)
    scheduler.run(frames(400, step=0.013))
    data = session.history_array("dq")
    assert np.allclose(data[:, 0], 0.8)
    assert np.allclose(data[:, 1], 0.0, atol=1e-12)


def test_angle_stays_wrapped(running):
    session, scheduler = running
    session.set_speed(2.7)
    for ts in frames(500, step=0.037):
        scheduler.fire(ts)
        assert 0.0 <= session.current_state().angle < TWO_PI


def test_negative_speed_wraps(running):
    session, scheduler = running
    session.set_speed(-1.5)
    for ts in frames(500, step=0.021):
        scheduler.fire(ts)
        assert 0.0 <= session.current_state().angle < TWO_PI
    assert session.current_state().angle > 0.0


def test_history_length_constant(running):
    session, scheduler = running
    for ts in frames(HISTORY_LENGTH + 25):
        scheduler.fire(ts)
        for domain in DOMAINS:
            assert len(session.history(domain)) == HISTORY_LENGTH


def test_pause_freezes_buffers_and_angle(running):
    session, scheduler = running
    scheduler.run(frames(20))
    session.set_playing(False)
    before = {d: session.history(d) for d in DOMAINS}
    angle = session.current_state().angle
    scheduler.run(frames(HISTORY_LENGTH, start=1.0))
    assert session.current_state().angle == angle
    for domain in DOMAINS:
        assert session.history(domain) == before[domain]


def test_resume_does_not_jump_over_pause(running):
    session, scheduler = running
    scheduler.run([0.0, 0.1])
    session.set_playing(False)
    scheduler.run([0.2, 50.0])
    angle = session.current_state().angle
    session.set_playing(True)
    scheduler.fire(50.1)
    assert session.current_state().angle == pytest.approx(wrap(angle + 0.1 * TWO_PI))


def wrap(angle):
    return angle % TWO_PI


def test_reset_clears_and_keeps_settings(running):
    session, scheduler = running
    session.set_speed(2.0)
    session.set_amplitude(1.3)
    session.set_playing(False)
    session.set_playing(True)
    scheduler.run(frames(50))
    session.reset()
    state = session.current_state()
    assert state.angle == 0.0
    assert (state.speed, state.amplitude, state.is_playing) == (2.0, 1.3, True)
    for domain in DOMAINS:
        assert not np.any(session.history_array(domain))
    assert session.current_phase().a == pytest.approx(1.3)


def test_reset_is_idempotent(running):
    session, scheduler = running
    scheduler.run(frames(30))
    session.reset()
    once = (session.current_state(), {d: session.history(d) for d in DOMAINS})
    session.reset()
    twice = (session.current_state(), {d: session.history(d) for d in DOMAINS})
    assert once == twice


def test_reset_while_paused_records_nothing(running):
    session, scheduler = running
    scheduler.run(frames(10))
    session.set_playing(False)
    session.reset()
    scheduler.run(frames(10, start=1.0))
    assert not np.any(session.history_array("abc"))


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf, "fast", None, True, False])
def test_non_finite_commands_rejected(session, bad, caplog):
    session.set_speed(2.0)
    session.set_amplitude(0.5)
    with caplog.at_level(logging.WARNING, logger="clarke_park_lab"):
        assert session.set_speed(bad) is False
        assert session.set_amplitude(bad) is False
    state = session.current_state()
    assert state.speed == 2.0
    assert state.amplitude == 0.5
    assert "ignoring" in caplog.text


def test_commands_are_not_clamped(session):
    assert session.set_speed(25.0) is True
    assert session.set_amplitude(-3.0) is True
    state = session.current_state()
    assert state.speed == 25.0
    assert state.amplitude == -3.0
    assert session.current_phase().a == pytest.approx(-3.0)


def test_show_projections_is_presentation_only(running):
    session, scheduler = running
    other = Session()
    other_scheduler = ManualScheduler()
    other.start(other_scheduler)
    session.toggle_projections()
    assert session.current_state().show_projections is False
    ts = frames(40)
    scheduler.run(ts)
    other_scheduler.run(ts)
    for domain in DOMAINS:
        assert session.history(domain) == other.history(domain)


def test_toggle_playing(session):
    session.toggle_playing()
    assert session.current_state().is_playing is False
    session.toggle_playing()
    assert session.current_state().is_playing is True


def test_stop_prevents_further_ticks(running):
    session, scheduler = running
    scheduler.run(frames(10))
    session.stop()
    assert not session.running
    state = session.current_state()
    history = session.history("abc")
    assert scheduler.fire(99.0) is False
    session.tick(100.0)
    assert session.current_state() == state
    assert session.history("abc") == history


def test_stop_is_idempotent(running):
    session, _ = running
    session.stop()
    session.stop()
    assert not session.running


def test_stop_requested_mid_tick_finishes_tick(session):
    scheduler = ManualScheduler()
    calls = []

    def listener(s):
        calls.append(s.current_state().angle)
        if len(calls) == 3:
            s.stop()

    session.add_listener(listener)
    session.start(scheduler)
    assert scheduler.run(frames(10)) == 3
    assert len(calls) == 3


def test_start_twice_rejected(running):
    session, _ = running
    with pytest.raises(RuntimeError):
        session.start(ManualScheduler())


def test_restart_after_stop_rebases_clock(running):
    session, scheduler = running
    scheduler.run([0.0, 0.1])
    angle = session.current_state().angle
    session.stop()
    second = ManualScheduler()
    session.start(second)
    second.fire(500.0)
    assert session.current_state().angle == angle


def test_listeners_notified_on_ticks_and_commands(running):
    session, scheduler = running
    seen = []
    session.add_listener(seen.append)
    scheduler.fire(0.0)
    session.set_speed(1.5)
    session.reset()
    assert seen == [session, session, session]
    session.remove_listener(seen.append)
    scheduler.fire(0.1)
    assert len(seen) == 3


def test_sessions_are_independent():
    first, second = Session(), Session()
    s1, s2 = ManualScheduler(), ManualScheduler()
    first.start(s1)
    second.start(s2)
    s1.run(frames(20))
    assert second.current_state().angle == 0.0
    assert not np.any(second.history_array("dq"))


def test_custom_history_length():
    session = Session(LabConfig(history_length=12))
    scheduler = ManualScheduler()
    session.start(scheduler)
    scheduler.run(frames(30))
    assert session.history_array("abc").shape == (12, 3)


def test_tick_without_scheduler(session):
    session.tick(0.0)
    session.tick(0.5)
    assert session.current_state().angle == pytest.approx(math.pi)


def test_unknown_domain(session):
    with pytest.raises(ValueError):
        session.history("xyz")


@pytest.mark.parametrize("speed", [1e308, -1e308, 1.7e308])
def test_huge_speed_keeps_state_finite(running, speed):
    session, scheduler = running
    assert session.set_speed(speed) is True
    for ts in [0.0, 0.5, 1.5, 4.0]:
        scheduler.fire(ts)
        assert 0.0 <= session.current_state().angle < TWO_PI
    for domain in DOMAINS:
        assert np.all(np.isfinite(session.history_array(domain)))


def test_extreme_amplitude_keeps_histories_finite(running):
    session, scheduler = running
    assert session.set_amplitude(1.5e308) is True
    scheduler.run(frames(30))
    for domain in DOMAINS:
        assert np.all(np.isfinite(session.history_array(domain)))
    assert session.history("dq")[0][0] == pytest.approx(1.5e308, rel=1e-9)
