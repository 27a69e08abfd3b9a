"""프록시 로그인 세션 관리.

접근 키 사용 시 생성되는 임시 세션을 메모리에 보관합니다.
세션은 유효 시간이 지나면 조회되지 않으며 다음 생성 시 정리됩니다.
"""

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from threading import Lock
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pdfpages.infrastructure.access.key_manager import AccessKeyManager

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """시간대 정보가 있는 현재 UTC 시각."""
    return datetime.now(UTC)


class SessionManager:
    """임시 세션 저장소.

    세션 ID → (사용자 ID, 만료 시각) 매핑만 보관합니다. 여러 요청에서
    공유되므로 모든 변경은 잠금 안에서 수행합니다.
    """

    def __init__(
        self, ttl_seconds: int = 3600, clock: Callable[[], datetime] = utcnow
    ) -> None:
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._sessions: dict[str, tuple[str, datetime]] = {}
        self._lock = Lock()

    def create(self, user_id: str) -> str:
        """사용자에 대한 새 세션을 생성하고 세션 ID를 반환합니다."""
        session_id = secrets.token_urlsafe(32)
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            self._sessions[session_id] = (user_id, now + self.ttl)
        logger.debug("[SESSION] 세션 생성", extra={"user_id": user_id})
        return session_id

    def get(self, session_id: str) -> str | None:
        """세션의 사용자 ID를 반환합니다. 없거나 만료되었으면 None."""
        now = self._clock()
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            user_id, expires_at = entry
            if now >= expires_at:
                del self._sessions[session_id]
                return None
            return user_id

    def terminate(self, session_id: str) -> None:
        """세션을 종료합니다. 이미 종료된 세션이면 아무 일도 하지 않습니다."""
        with self._lock:
            entry = self._sessions.pop(session_id, None)
        if entry is not None:
            logger.info("[SESSION] 세션 종료", extra={"user_id": entry[0]})

    def _purge_expired(self, now: datetime) -> None:
        expired = [sid for sid, (_, expires_at) in self._sessions.items() if now >= expires_at]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.debug("[SESSION] 만료 세션 정리", extra={"count": len(expired)})


class CurrentSession:
    """변환 한 건 동안 발급된 접근 키로 만들어진 세션을 추적합니다.

    사용법:
        session = CurrentSession(key_manager, session_manager)
        session.track(key.value)
        ...
        session.terminate_current()
    """

    def __init__(self, key_manager: "AccessKeyManager", session_manager: SessionManager) -> None:
        self._key_manager = key_manager
        self._session_manager = session_manager
        self._keys: list[str] = []

    def track(self, key_value: str) -> None:
        """이번 변환에서 발급한 접근 키를 등록합니다."""
        self._keys.append(key_value)

    def terminate_current(self) -> None:
        """등록된 접근 키로 생성된 모든 세션을 종료합니다 (멱등).

        사용되지 않은 접근 키는 폐기하여 이후 재사용을 막습니다.
        """
        for key_value in self._keys:
            session_id = self._key_manager.session_for(key_value)
            if session_id is not None:
                self._session_manager.terminate(session_id)
            self._key_manager.revoke(key_value)

