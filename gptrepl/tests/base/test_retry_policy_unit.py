from __future__ import annotations

import pytest

from gptrepl.base.errors import ErrorCode, ReplError
from gptrepl.base.resilience.retry import RetryConfig, retry


class _Flaky:
    def __init__(self, fail_times: int, code: ErrorCode = ErrorCode.UNAVAILABLE):
        self.calls = 0
        self.fail_times = fail_times
        self.code = code

    def __call__(self):
        self.calls += 1
        if self.calls <= self.fail_times:
            raise ReplError(code=self.code, message=f"boom {self.calls}")
        return "ok"


def test_delays_grow_geometrically_with_jitter_on_next_wait():
    cfg = RetryConfig(max_retries=4, rng=lambda: 0.75)
    jitter = 0.75 / 3
    expected = [1.0]
    for _ in range(3):
        expected.append(expected[-1] * 2 + jitter)
    assert list(cfg.delays()) == pytest.approx(expected)  # nosec B101


def test_zero_jitter_gives_powers_of_two():
    cfg = RetryConfig(max_retries=3, rng=lambda: 0.0)
    assert list(cfg.delays()) == [1.0, 2.0, 4.0]  # nosec B101


def test_retry_succeeds_after_failures(no_sleep):
    attempt_log = []
    cfg = RetryConfig(max_retries=3, rng=lambda: 0.0, attempt_logger=lambda **kw: attempt_log.append(kw))
    flaky = _Flaky(fail_times=2)

    @retry(cfg)
    def run():
        return flaky()

    assert run() == "ok"  # nosec B101
    assert flaky.calls == 3  # nosec B101
    assert no_sleep == [1.0, 2.0]  # nosec B101
    assert attempt_log[-1]["error"] is None  # nosec B101
    assert attempt_log[0]["max_attempts"] == 4  # nosec B101


def test_retry_exhaustion_raises_last_error(no_sleep):
    cfg = RetryConfig(max_retries=2, rng=lambda: 0.0)
    flaky = _Flaky(fail_times=99)

    @retry(cfg)
    def run():
        return flaky()

    with pytest.raises(ReplError) as ei:
        run()
    assert str(ei.value) == "boom 3"  # nosec B101
    assert flaky.calls == 3  # nosec B101
    assert len(no_sleep) == 2  # nosec B101


def test_zero_retries_makes_single_attempt(no_sleep):
    flaky = _Flaky(fail_times=1)

    @retry(RetryConfig(max_retries=0))
    def run():
        return flaky()

    with pytest.raises(ReplError):
        run()
    assert flaky.calls == 1  # nosec B101
    assert no_sleep == []  # nosec B101


def test_restricted_codes_stop_early(no_sleep):
    cfg = RetryConfig(max_retries=5, retryable_codes=(ErrorCode.RATE_LIMIT,))
    flaky = _Flaky(fail_times=99, code=ErrorCode.AUTH)

    @retry(cfg)
    def run():
        return flaky()

    with pytest.raises(ReplError) as ei:
        run()
    assert ei.value.code is ErrorCode.AUTH  # nosec B101
    assert flaky.calls == 1  # nosec B101
