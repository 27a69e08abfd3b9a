"""단일 사용 접근 키 관리.

헤드리스 브라우저가 전체 로그인 과정 없이 대상 페이지에 접근할 수 있도록
사용자와 URL에 묶인 짧은 수명의 접근 키를 발급하고 검증합니다.
"""

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta
from threading import Lock

from pdfpages.domain.conversion.models import AccessKey, RedeemedKey
from pdfpages.infrastructure.access.session import SessionManager, utcnow

logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    """알 수 없거나, 이미 사용되었거나, 만료된 접근 키."""

    pass


class InstanceMismatchError(Exception):
    """다른 렌더러 인스턴스용으로 발급된 접근 키."""

    pass


class AccessKeyManager:
    """접근 키 발급/사용 관리자.

    키는 한 번만 사용할 수 있으며, 확인과 폐기는 하나의 잠금 구간에서
    수행되므로 동시에 두 요청이 같은 키를 사용할 수 없습니다.

    사용법:
        manager = AccessKeyManager(SessionManager(), ttl_seconds=120, instance_id=1)
        key = manager.issue("42", "https://lms.example.com/course/view.php?id=3")
        redeemed = manager.redeem(key.value, 1)
    """

    def __init__(
        self,
        session_manager: SessionManager,
        ttl_seconds: int = 120,
        instance_id: int = 1,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """초기화.

        Args:
            session_manager: 키 사용 시 세션을 생성할 세션 저장소
            ttl_seconds: 키 유효 시간 (초)
            instance_id: 이 렌더러 인스턴스의 ID
            clock: 현재 시각 함수 (테스트 주입용)
        """
        self.session_manager = session_manager
        self.ttl = timedelta(seconds=ttl_seconds)
        self.instance_id = instance_id
        self._clock = clock
        self._keys: dict[str, AccessKey] = {}
        self._sessions_by_key: dict[str, str] = {}
        self._lock = Lock()

    def issue(self, user_id: str, target_url: str) -> AccessKey:
        """사용자와 대상 URL에 묶인 새 접근 키를 발급합니다.

        Args:
            user_id: 키를 사용할 사용자 ID
            target_url: 키로 접근할 대상 URL

        Returns:
            발급된 접근 키
        """
        now = self._clock()
        with self._lock:
            self._purge_expired(now)

            value = secrets.token_hex(16)
            while value in self._keys:
                value = secrets.token_hex(16)

            key = AccessKey(
                value=value,
                user_id=user_id,
                target_url=target_url,
                instance_id=self.instance_id,
                expires_at=now + self.ttl,
            )
            self._keys[value] = key

        logger.info(
            "[ACCESS_KEY] 접근 키 발급",
            extra={"user_id": user_id, "target_url": target_url, "expires_at": key.expires_at},
        )
        return key

    def redeem(self, value: str, instance_id: int) -> RedeemedKey:
        """접근 키를 사용하고 해당 사용자의 임시 세션을 생성합니다.

        Args:
            value: 접근 키 문자열
            instance_id: 요청한 렌더러 인스턴스 ID

        Returns:
            사용자 ID, 대상 URL, 생성된 세션 ID

        Raises:
            InvalidTokenError: 키가 없거나, 이미 사용되었거나, 만료된 경우
            InstanceMismatchError: 다른 인스턴스용 키인 경우
        """
        now = self._clock()
        with self._lock:
            key = self._keys.pop(value, None)

            if key is None:
                raise InvalidTokenError("유효하지 않은 접근 키입니다")
            if key.is_expired(now):
                raise InvalidTokenError("만료된 접근 키입니다")
            if key.instance_id != instance_id:
                raise InstanceMismatchError(
                    f"접근 키 인스턴스가 일치하지 않습니다 (expected={key.instance_id}, got={instance_id})"
                )

            session_id = self.session_manager.create(key.user_id)
            self._sessions_by_key[value] = session_id

        logger.info(
            "[ACCESS_KEY] 접근 키 사용",
            extra={"user_id": key.user_id, "target_url": key.target_url},
        )
        return RedeemedKey(user_id=key.user_id, target_url=key.target_url, session_id=session_id)

    def session_for(self, value: str) -> str | None:
        """접근 키 사용으로 생성된 세션 ID를 반환합니다."""
        with self._lock:
            return self._sessions_by_key.get(value)

    def revoke(self, value: str) -> None:
        """접근 키와 세션 기록을 폐기합니다."""
        with self._lock:
            self._keys.pop(value, None)
            self._sessions_by_key.pop(value, None)

    def _purge_expired(self, now: datetime) -> None:
        expired = [value for value, key in self._keys.items() if key.is_expired(now)]
        for value in expired:
            del self._keys[value]

        # keep_session 요청이 남긴 기록 중 세션이 이미 끝난 항목
        stale = [
            value
            for value, session_id in self._sessions_by_key.items()
            if self.session_manager.get(session_id) is None
        ]
        for value in stale:
            del self._sessions_by_key[value]
