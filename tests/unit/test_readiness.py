"""페이지 준비 상태 대기 테스트."""

import time

import pytest

from pdfpages.domain.conversion.models import ReadinessState
from pdfpages.infrastructure.renderer import ReadinessTimeoutError, ReadinessWaiter


class VirtualTime:
    """sleep 호출만큼 진행되는 가상 시계."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _condition_true_after(vt: VirtualTime, seconds: float):
    async def evaluate() -> bool:
        return vt.now >= seconds

    return evaluate


class TestReadinessWaiter:
    """ReadinessWaiter 테스트."""

    async def test_조건이_없으면_바로_충족된다(self) -> None:
        """조건 스크립트가 없으면 대기 없이 SATISFIED."""
        vt = VirtualTime()
        waiter = ReadinessWaiter(timeout_ms=1000, clock=vt.clock, sleep=vt.sleep)

        state = await waiter.wait(None)

        assert state is ReadinessState.SATISFIED
        assert vt.sleeps == []

    async def test_처음부터_참이면_한_번만_평가한다(self) -> None:
        vt = VirtualTime()
        waiter = ReadinessWaiter(timeout_ms=1000, clock=vt.clock, sleep=vt.sleep)

        state = await waiter.wait(_condition_true_after(vt, 0))

        assert state is ReadinessState.SATISFIED
        assert waiter.attempts == 1
        assert vt.sleeps == []

    async def test_제한_시간_안에_참이_되면_충족된다(self) -> None:
        """2초 동안 거짓이던 조건이 참이 되면 타임아웃(5초) 전에 SATISFIED."""
        # Given
        vt = VirtualTime()
        waiter = ReadinessWaiter(timeout_ms=5000, clock=vt.clock, sleep=vt.sleep)

        # When
        state = await waiter.wait(_condition_true_after(vt, 2.0))

        # Then
        assert state is ReadinessState.SATISFIED
        assert vt.now == pytest.approx(2.0)
        assert all(interval == 0.5 for interval in vt.sleeps)

    async def test_조건이_계속_거짓이면_시간_초과된다(self) -> None:
        """조건이 충족되지 않으면 ReadinessTimeoutError가 발생한다."""
        # Given
        vt = VirtualTime()
        waiter = ReadinessWaiter(timeout_ms=1000, clock=vt.clock, sleep=vt.sleep)

        async def never() -> bool:
            return False

        # When & Then
        with pytest.raises(ReadinessTimeoutError):
            await waiter.wait(never)

        assert waiter.state is ReadinessState.TIMED_OUT
        assert 1.0 <= vt.now < 1.5

    async def test_참과_같은_값이어도_True가_아니면_충족되지_않는다(self) -> None:
        """문자열 "true"나 1은 준비 완료로 보지 않는다."""
        vt = VirtualTime()
        waiter = ReadinessWaiter(timeout_ms=5000, clock=vt.clock, sleep=vt.sleep)
        results = iter(["true", 1, True])

        async def evaluate() -> object:
            return next(results)

        state = await waiter.wait(evaluate)

        assert state is ReadinessState.SATISFIED
        assert waiter.attempts == 3

    async def test_평가_오류는_그대로_전파된다(self) -> None:
        vt = VirtualTime()
        waiter = ReadinessWaiter(timeout_ms=1000, clock=vt.clock, sleep=vt.sleep)

        async def broken() -> bool:
            raise RuntimeError("page crashed")

        with pytest.raises(RuntimeError, match="page crashed"):
            await waiter.wait(broken)

    async def test_실제_시간으로도_제한_시간에_맞춰_종료된다(self) -> None:
        """실제 시계 기준으로 1초 타임아웃은 1.0~1.5초 사이에 끝난다."""
        waiter = ReadinessWaiter(timeout_ms=1000)

        async def never() -> bool:
            return False

        start = time.monotonic()
        with pytest.raises(ReadinessTimeoutError):
            await waiter.wait(never)
        elapsed = time.monotonic() - start

        assert 1.0 <= elapsed < 1.6
