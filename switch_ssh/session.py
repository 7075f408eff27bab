"""
SSH会话模块
封装交换机的交互式shell会话：指令写入、定时读取、品牌识别、可用性检查
"""
import threading
import time
from enum import Enum
from typing import List, Optional

from .config import settings
from .connector import connect, ShellTransport
from .mux import StreamMultiplexer
from .plugin_manager import plugin_manager
from .reader import TimedReader
from .result_filter import sanitizer_for_brand
from .utils import logger as default_logger, SwitchSSHException, SessionSetupError, WriteError

PROMPT_CHARS = ("#", ">", "]")

# 显示版本后多发一组空格，避免版本信息过多需要分页，导致分页后第一个字符失效
BRAND_PROBE_COMMANDS = ("dis version", "show version", "     ")


class SessionState(str, Enum):
    """会话状态"""
    OPEN = "open"
    DEGRADED = "degraded"  # 读写线程因I/O错误退出
    CLOSED = "closed"


class SSHSession:
    """
    交换机SSH会话

    持有一个会话通道、写入队列和读取队列，同时记录品牌和最后使用时间。
    会话本身不做任何并发控制，同一会话同一时刻只能被一个调用方使用，
    由外部的会话管理器保证。
    """

    def __init__(self, transport: ShellTransport, logger=None, brand: str = ""):
        self._transport = transport
        self._logger = logger or default_logger
        self._brand = brand
        self._state = SessionState.OPEN
        self._cancel = threading.Event()

        self._mux = StreamMultiplexer(
            transport.channel,
            transport.channel,
            on_failure=self._on_io_failure,
            logger=self._logger,
        )
        self._mux.start()
        self._reader = TimedReader(self._mux.read_queue, logger=self._logger, cancel_event=self._cancel)
        self.last_use_time = time.time()

    @classmethod
    def create(cls, user: str, password: str, address: str,
               brand: str = "", logger=None) -> "SSHSession":
        """
        连接交换机并创建会话

        Raises:
            ConnectError, AuthError, SessionSetupError
        """
        logger = logger or default_logger
        transport = connect(user, password, address, logger=logger)
        session = None
        try:
            session = cls(transport, logger=logger, brand=brand)
            session.start()
        except Exception as e:
            if session is not None:
                session.close()
            else:
                transport.close()
            if isinstance(e, SwitchSSHException):
                raise
            logger.error(f"创建会话失败: {str(e)}")
            raise SessionSetupError(f"创建会话失败: {str(e)}", details={"address": address})
        return session

    def start(self):
        """打开远程shell并等待登录信息输出"""
        try:
            self._transport.channel.invoke_shell()
        except Exception as e:
            self._logger.error(f"打开shell失败: {str(e)}")
            raise SessionSetupError(f"打开shell失败: {str(e)}")
        self.read_until_any_of(settings.ssh_login_idle_timeout, *PROMPT_CHARS)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_healthy(self) -> bool:
        return self._state == SessionState.OPEN

    @property
    def brand(self) -> str:
        return self._brand

    def set_brand(self, brand: str):
        """使用调用方提供的品牌填充缓存，跳过探测"""
        self._brand = brand

    def update_last_use_time(self):
        """更新最后的使用时间"""
        self.last_use_time = time.time()

    def _on_io_failure(self, error: SwitchSSHException):
        if self._state == SessionState.OPEN:
            self._state = SessionState.DEGRADED
            self._logger.warning(f"会话不可用，标记为degraded: {error.message}")

    def write_commands(self, *cmds: str):
        """向写入队列依次写入指令"""
        if self._state == SessionState.CLOSED:
            raise WriteError("会话已关闭，无法写入指令", details={"commands": list(cmds)})
        if self._state == SessionState.DEGRADED:
            self._logger.warning("会话处于degraded状态，写入的指令可能不会被发送")
        self._logger.debug(f"write_commands <cmds={list(cmds)}>")
        for cmd in cmds:
            self._mux.write_queue.put(cmd)
        self.update_last_use_time()

    def read_until_idle(self, max_idle: float, max_total: Optional[float] = None) -> str:
        """读取输出，直到输出流间隔超过 max_idle 秒"""
        result = self._reader.read_until_idle(max_idle, max_total)
        self.update_last_use_time()
        return result

    def read_until_any_of(self, max_idle: float, *expects: str, max_total: Optional[float] = None) -> str:
        """读取输出，直到包含 expects 中任一字符串或输出流间隔超过 max_idle 秒"""
        result = self._reader.read_until_any_of(max_idle, expects, max_total)
        self.update_last_use_time()
        return result

    def get_vendor_brand(self) -> str:
        """
        获取交换机品牌

        Returns:
            huawei、h3c、cisco，无法识别时返回空字符串
        """
        if self._brand:
            return self._brand
        try:
            self.write_commands(*BRAND_PROBE_COMMANDS)
            result = self.read_until_idle(settings.ssh_brand_idle_timeout)
            brand = plugin_manager.match_brand(result)
            if brand:
                self._logger.debug(f"The switch brand is <{brand}>.")
                self._brand = brand
        except Exception as e:
            self._logger.error(f"获取交换机品牌失败: {str(e)}")
        return self._brand

    def check_alive(self) -> bool:
        """检查当前会话是否可用"""
        if self._state == SessionState.CLOSED:
            return False
        try:
            prompt_chars = self.prompt_chars()
            self.write_commands("")
            result = self.read_until_any_of(settings.ssh_check_idle_timeout, *prompt_chars)
        except Exception as e:
            self._logger.error(f"会话检查失败: {str(e)}")
            return False
        return any(char in result for char in prompt_chars)

    def prompt_chars(self) -> List[str]:
        """提示符结尾字符：通用字符加上当前品牌插件声明的字符"""
        chars = list(PROMPT_CHARS)
        for char in plugin_manager.get_prompt_chars(self._brand) if self._brand else []:
            if char not in chars:
                chars.append(char)
        return chars

    def output_filters(self) -> List[str]:
        """当前品牌对应的输出剔除序列"""
        return sanitizer_for_brand(self._brand)

    def close(self):
        """关闭会话通道和输入输出队列，异常只记录不抛出"""
        if self._state == SessionState.CLOSED:
            self._logger.warning("会话已经关闭")
            return
        self._state = SessionState.CLOSED
        self._cancel.set()
        try:
            self._mux.close()
            self._transport.close()
        except Exception as e:
            self._logger.error(f"关闭会话失败: {str(e)}")
