"""
会话管理器

按 (用户名, 密码, 地址) 缓存可复用的SSH会话，
并为每个身份提供独立的锁，保证同一会话同一时刻只有一个使用者。
"""
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, List, Any, Optional

from .config import settings
from .session import SSHSession
from .utils import logger as default_logger


def session_key(user: str, password: str, address: str) -> str:
    """会话缓存的键"""
    return f"{user}_{password}_{address}"


class SessionManager:
    """会话管理器"""

    def __init__(self,
                 session_factory: Callable[..., SSHSession] = None,
                 idle_timeout: Optional[float] = None,
                 cleanup_interval: Optional[float] = None,
                 logger=None):
        """
        Args:
            session_factory: 创建会话的函数，签名同 SSHSession.create
            idle_timeout: 会话空闲超过该时间后被回收
            cleanup_interval: 回收线程的检查间隔
        """
        self._factory = session_factory or SSHSession.create
        self.idle_timeout = idle_timeout if idle_timeout is not None else settings.session_idle_timeout
        self.cleanup_interval = cleanup_interval if cleanup_interval is not None else settings.session_cleanup_interval
        self._logger = logger or default_logger

        self._sessions: Dict[str, SSHSession] = {}
        self._owners: Dict[str, str] = {}  # key -> user@address，用于展示，不含密码
        self._locks: Dict[str, threading.Lock] = {}
        self._lock_users: Dict[str, int] = {}  # 持有或等待该身份锁的调用方数量
        self._lock = threading.Lock()

        self._cleanup_thread: Optional[threading.Thread] = None
        self._cleanup_stop = threading.Event()

    def _identity_lock(self, key: str) -> threading.Lock:
        with self._lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def lock_session(self, key: str):
        """锁定会话，阻塞直到获得该身份的锁"""
        with self._lock:
            self._lock_users[key] = self._lock_users.get(key, 0) + 1
        self._identity_lock(key).acquire()

    def unlock_session(self, key: str):
        """解锁会话"""
        self._identity_lock(key).release()
        with self._lock:
            users = self._lock_users.get(key, 0) - 1
            if users > 0:
                self._lock_users[key] = users
            else:
                self._lock_users.pop(key, None)
                self._prune_lock(key)

    def _prune_lock(self, key: str):
        # 调用方需持有 self._lock；只有无人持有或等待时才能删除
        if key not in self._lock_users and key not in self._sessions:
            self._locks.pop(key, None)

    def lock_count(self) -> int:
        with self._lock:
            return len(self._locks)

    @contextmanager
    def session_lock(self, key: str):
        """在 with 块内持有该身份的锁"""
        self.lock_session(key)
        try:
            yield
        finally:
            self.unlock_session(key)

    def get_session(self, user: str, password: str, address: str, brand: str = "") -> SSHSession:
        """
        获取可用的会话，不存在或已失效时新建

        调用方需要先持有该身份的锁。

        Raises:
            ConnectError, AuthError, SessionSetupError
        """
        key = session_key(user, password, address)
        with self._lock:
            session = self._sessions.get(key)

        if session is not None:
            if session.is_healthy and session.check_alive():
                self._logger.debug(f"复用会话: {user}@{address}")
                if brand and not session.brand:
                    session.set_brand(brand)
                return session
            self._logger.info(f"会话已失效，重新创建: {user}@{address}")
            self.remove_session(key)

        self._logger.info(f"创建新会话: {user}@{address}")
        session = self._factory(user, password, address, brand=brand, logger=self._logger)
        with self._lock:
            self._sessions[key] = session
            self._owners[key] = f"{user}@{address}"
        return session

    def remove_session(self, key: str) -> bool:
        """关闭并移除会话"""
        with self._lock:
            session = self._sessions.pop(key, None)
            self._owners.pop(key, None)
        if session is None:
            return False
        session.close()
        return True

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def list_sessions(self) -> List[Dict[str, Any]]:
        """列出所有缓存的会话"""
        with self._lock:
            return [
                {
                    "identity": self._owners.get(key, ""),
                    "brand": session.brand,
                    "state": session.state.value,
                    "last_use_time": session.last_use_time,
                }
                for key, session in self._sessions.items()
            ]

    def cleanup_idle_sessions(self, max_idle: Optional[float] = None) -> int:
        """
        回收空闲会话

        正在被使用（锁被持有）的会话会被跳过。

        Returns:
            回收的会话数量
        """
        max_idle = self.idle_timeout if max_idle is None else max_idle
        now = time.time()
        with self._lock:
            candidates = [
                key for key, session in self._sessions.items()
                if now - session.last_use_time > max_idle
            ]

        removed = 0
        for key in candidates:
            lock = self._identity_lock(key)
            if not lock.acquire(blocking=False):
                continue
            try:
                with self._lock:
                    session = self._sessions.get(key)
                    if session is None or time.time() - session.last_use_time <= max_idle:
                        continue
                    identity = self._owners.get(key, "")
                if self.remove_session(key):
                    removed += 1
                    self._logger.info(f"回收空闲会话: {identity}")
                with self._lock:
                    self._prune_lock(key)
            finally:
                lock.release()
        return removed

    def start_cleanup(self):
        """启动空闲会话回收线程"""
        if self._cleanup_thread and self._cleanup_thread.is_alive():
            return
        self._cleanup_stop.clear()
        self._cleanup_thread = threading.Thread(
            target=self._cleanup_worker, name="switch-ssh-cleanup", daemon=True
        )
        self._cleanup_thread.start()

    def stop_cleanup(self):
        """停止回收线程"""
        self._cleanup_stop.set()
        if self._cleanup_thread and self._cleanup_thread.is_alive():
            self._cleanup_thread.join(timeout=5)
        self._cleanup_thread = None

    def _cleanup_worker(self):
        while not self._cleanup_stop.wait(self.cleanup_interval):
            try:
                self.cleanup_idle_sessions()
            except Exception as e:
                self._logger.error(f"回收空闲会话时出错: {e}")

    def shutdown(self):
        """停止回收线程并关闭所有会话"""
        self.stop_cleanup()
        with self._lock:
            keys = list(self._sessions.keys())
        for key in keys:
            self.remove_session(key)
        self._logger.info("会话管理器已关闭")


# 全局会话管理器实例
session_manager = SessionManager()
