import pytest

from util.functions import clean_query, percent, round_half_up
from util.timing import Pacer


@pytest.mark.anyio
async def test_pacer_first_call_is_free_and_later_calls_wait(clock):
    pacer = Pacer(0.5, clock)

    assert await pacer.wait() == 0.0
    assert await pacer.wait() == pytest.approx(0.5)
    clock.advance(0.2)
    assert await pacer.wait() == pytest.approx(0.3)
    assert clock.sleeps == [0.5, 0.3]


@pytest.mark.anyio
async def test_pacer_does_not_sleep_when_interval_elapsed(clock):
    pacer = Pacer(0.2, clock)
    await pacer.wait()
    clock.advance(1.0)
    assert await pacer.wait() == 0.0
    assert clock.sleeps == []


@pytest.mark.anyio
async def test_zero_interval_never_sleeps(clock):
    pacer = Pacer(0, clock)
    for _ in range(3):
        await pacer.wait()
    assert clock.sleeps == []


def test_round_half_up():
    assert round_half_up(27.5) == 28
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert percent(1, 3) == 33
    assert percent(1, 8) == 13
    assert percent(5, 0) == 0


def test_clean_query():
    text = "Gandhi [12] was an Indian lawyer, anti-colonial nationalist!"
    assert clean_query(text) == "Gandhi was an Indian lawyer anti colonial nationalist"
    assert len(clean_query("word " * 100, max_chars=20)) <= 20


@pytest.mark.anyio
async def test_gap_is_measured_from_the_end_of_the_call(clock):
    pacer = Pacer(0.5, clock)

    await pacer.wait()
    clock.advance(2.0)  # a slow call
    pacer.done()

    assert await pacer.wait() == pytest.approx(0.5)
    assert clock.sleeps == [0.5]
