"""
流复用模块
将会话的原始输入输出字节流转换为写入队列和读取队列，
由两个独立线程分别负责写入和读取
"""
import codecs
import queue
import threading
from typing import Callable, Optional

from .config import settings
from .utils import logger as default_logger, SwitchSSHException, WriteError, ReadError

# 写入队列关闭标记
_CLOSED = object()


class StreamMultiplexer:
    """输入输出流复用器"""

    def __init__(self, stdin, stdout,
                 on_failure: Optional[Callable[[SwitchSSHException], None]] = None,
                 logger=None,
                 encoding: Optional[str] = None,
                 buffer_size: Optional[int] = None):
        """
        Args:
            stdin: 输入端，需提供 sendall(bytes)
            stdout: 输出端，需提供 recv(n)
            on_failure: 读写线程因I/O错误退出时的回调
            encoding: 输出字节的解码方式
            buffer_size: 单次读取的最大字节数
        """
        self._stdin = stdin
        self._stdout = stdout
        self._on_failure = on_failure
        self._logger = logger or default_logger
        self._encoding = encoding or settings.ssh_encoding
        self._buffer_size = buffer_size or settings.ssh_read_buffer_size

        self.write_queue: "queue.Queue" = queue.Queue()
        self.read_queue: "queue.Queue[str]" = queue.Queue()

        self._closed = threading.Event()
        self._writer: Optional[threading.Thread] = None
        self._reader: Optional[threading.Thread] = None

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def start(self):
        """启动读写线程"""
        self._writer = threading.Thread(target=self._write_loop, name="switch-ssh-writer", daemon=True)
        self._reader = threading.Thread(target=self._read_loop, name="switch-ssh-reader", daemon=True)
        self._writer.start()
        self._reader.start()

    def close(self):
        """关闭写入队列，通知写线程退出"""
        if self._closed.is_set():
            return
        self._closed.set()
        self.write_queue.put(_CLOSED)

    def _fail(self, error: SwitchSSHException):
        # 主动关闭后的读写错误属于正常退出
        if self._closed.is_set():
            self._logger.debug(f"复用器已关闭，线程退出: {error.message}")
            return
        self._logger.error(error.message)
        if self._on_failure:
            self._on_failure(error)

    def _write_loop(self):
        try:
            while True:
                cmd = self.write_queue.get()
                if cmd is _CLOSED:
                    self._logger.debug("写入队列已关闭，写线程退出")
                    return
                try:
                    self._stdin.sendall((cmd + "\n").encode(self._encoding))
                except Exception as e:
                    self._fail(WriteError(f"写入指令失败: {str(e)}", details={"command": cmd}))
                    return
        except Exception as e:
            self._logger.error(f"写线程异常退出: {str(e)}")

    def _read_loop(self):
        try:
            decoder = codecs.getincrementaldecoder(self._encoding)(errors="replace")
            while True:
                try:
                    data = self._stdout.recv(self._buffer_size)
                except Exception as e:
                    self._fail(ReadError(f"读取输出失败: {str(e)}"))
                    return
                if not data:
                    self._fail(ReadError("远端已关闭连接"))
                    return
                text = decoder.decode(data)
                if text:
                    self.read_queue.put(text)
        except Exception as e:
            self._logger.error(f"读线程异常退出: {str(e)}")
