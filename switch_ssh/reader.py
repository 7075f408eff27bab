"""
定时读取模块

交换机CLI没有明确的"输出结束"信号，这里以"连续 max_idle 秒没有新输出"
作为指令执行完毕的判断依据：队列为空时等待一个空闲窗口，再检查一次，
仍为空则返回。

注意：链路较慢或输出分页时，设备可能在空闲窗口内没有输出但实际尚未完成，
此时会提前返回不完整的结果。
"""
import queue
import threading
import time
from typing import Iterable, List, Optional

from .utils import logger as default_logger


class TimedReader:
    """基于空闲超时的读取器"""

    def __init__(self, read_queue: "queue.Queue[str]", logger=None,
                 cancel_event: Optional[threading.Event] = None):
        self._queue = read_queue
        self._logger = logger or default_logger
        self._cancel = cancel_event or threading.Event()

    def cancel(self):
        """中断正在等待中的读取，之后的读取立即返回"""
        self._cancel.set()

    def read_until_idle(self, max_idle: float, max_total: Optional[float] = None) -> str:
        """读取输出，直到连续 max_idle 秒没有新数据"""
        self._logger.debug(f"read_until_idle <max_idle={max_idle}>")
        return self._read(max_idle, (), max_total)

    def read_until_any_of(self, max_idle: float, expects: Iterable[str],
                          max_total: Optional[float] = None) -> str:
        """读取输出，直到某块输出包含 expects 中任一字符串，或空闲超时"""
        expects = tuple(expects)
        self._logger.debug(f"read_until_any_of <max_idle={max_idle}, expects={list(expects)}>")
        return self._read(max_idle, expects, max_total)

    def _read(self, max_idle: float, expects: tuple, max_total: Optional[float]) -> str:
        chunks: List[str] = []
        idle_waited = False
        deadline = None if max_total is None else time.monotonic() + max_total

        while True:
            try:
                chunk = self._queue.get_nowait()
            except queue.Empty:
                # 已经等待过一个空闲窗口，直接返回
                if idle_waited or self._cancel.is_set():
                    break
                wait = max_idle
                if deadline is not None:
                    wait = min(wait, deadline - time.monotonic())
                    if wait <= 0:
                        break
                self._logger.debug("读取队列为空")
                if self._cancel.wait(wait):
                    break
                idle_waited = True
                continue

            idle_waited = False
            chunks.append(chunk)
            if any(expect in chunk for expect in expects):
                break
            if deadline is not None and time.monotonic() >= deadline:
                break

        return "".join(chunks)
