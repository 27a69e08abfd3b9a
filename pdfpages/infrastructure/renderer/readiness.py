"""페이지 준비 상태 대기.

MathJax 등 비동기 렌더링이 끝날 때까지 호출자가 제공한 JavaScript 조건을
주기적으로 평가합니다.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, Final

from pdfpages.domain.conversion.models import ReadinessState

logger = logging.getLogger(__name__)


class ReadinessTimeoutError(Exception):
    """제한 시간 안에 페이지 준비 조건이 충족되지 않음."""

    pass


class ReadinessWaiter:
    """준비 조건 폴링 상태 머신.

    PENDING → SATISFIED 또는 PENDING → TIMED_OUT 으로만 전이합니다.
    평가 결과가 정확히 True일 때만 충족으로 봅니다.

    사용법:
        waiter = ReadinessWaiter(timeout_ms=30000)
        await waiter.wait(lambda: page.evaluate(script))
    """

    # 재확인 간격 (초)
    POLL_INTERVAL: Final[float] = 0.5

    def __init__(
        self,
        timeout_ms: int,
        interval: float = POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """초기화.

        Args:
            timeout_ms: 최대 대기 시간 (밀리초)
            interval: 재확인 간격 (초)
            clock: 경과 시간 측정 함수 (초 단위)
            sleep: 대기 함수
        """
        self.timeout_ms = timeout_ms
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self.state = ReadinessState.PENDING
        self.attempts = 0

    async def wait(self, evaluate: Callable[[], Awaitable[Any]] | None) -> ReadinessState:
        """조건이 충족될 때까지 대기합니다.

        Args:
            evaluate: 페이지에서 조건을 평가하는 코루틴 함수. None이면 대기하지 않음

        Returns:
            최종 상태 (SATISFIED)

        Raises:
            ReadinessTimeoutError: 제한 시간 초과 시
        """
        if evaluate is None:
            self.state = ReadinessState.SATISFIED
            return self.state

        start = self._clock()
        while self.state is ReadinessState.PENDING:
            self.attempts += 1
            if await evaluate() is True:
                self.state = ReadinessState.SATISFIED
                break

            await self._sleep(self.interval)

            elapsed_ms = (self._clock() - start) * 1000
            if elapsed_ms >= self.timeout_ms:
                self.state = ReadinessState.TIMED_OUT
                logger.warning(
                    "[READINESS] 준비 조건 대기 시간 초과",
                    extra={"timeout_ms": self.timeout_ms, "attempts": self.attempts},
                )
                raise ReadinessTimeoutError(
                    f"페이지 준비 조건이 {self.timeout_ms}ms 안에 충족되지 않았습니다"
                )

        logger.debug("[READINESS] 준비 조건 충족", extra={"attempts": self.attempts})
        return self.state
