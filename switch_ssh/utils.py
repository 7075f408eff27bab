"""
工具函数模块
包含日志配置、异常定义、系统监控等通用功能
"""
import logging
import time
import traceback
from datetime import datetime
from functools import wraps
from typing import Dict, Any, Optional

import psutil

from .config import settings


class SessionLogger:
    """
    会话日志管理类

    debug 开关决定是否输出详细跟踪日志，错误日志始终输出。
    日志仅用于记录，不影响任何控制流程。
    """

    def __init__(self, name: str = "switch_ssh", debug: Optional[bool] = None):
        self.logger = logging.getLogger(name)
        self.debug_enabled = settings.debug if debug is None else debug
        self._setup_logger()

    def _setup_logger(self):
        """配置日志"""
        level = getattr(logging, settings.log_level.upper(), logging.INFO)
        if self.debug_enabled:
            level = logging.DEBUG
        self.logger.setLevel(level)

        # 避免重复添加handler
        if not self.logger.handlers:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.DEBUG)
            console_handler.setFormatter(logging.Formatter(settings.log_format))
            self.logger.addHandler(console_handler)

    def info(self, message: str, **kwargs):
        """记录信息日志"""
        self.logger.info(message, extra=kwargs)

    def error(self, message: str, **kwargs):
        """记录错误日志"""
        self.logger.error(message, extra=kwargs)

    def warning(self, message: str, **kwargs):
        """记录警告日志"""
        self.logger.warning(message, extra=kwargs)

    def debug(self, message: str, **kwargs):
        """记录调试日志，仅在debug开关打开时输出"""
        if self.debug_enabled:
            self.logger.debug(message, extra=kwargs)


class SwitchSSHException(Exception):
    """自定义异常基类"""

    def __init__(self, message: str, error_code: str = "SWITCH_SSH_ERROR", details: Optional[Dict] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.timestamp = datetime.now()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat()
        }


class ConnectError(SwitchSSHException):
    """SSH连接异常（拨号失败、超时、协商失败）"""

    def __init__(self, message: str, host: str = "", details: Optional[Dict] = None):
        super().__init__(message, "SSH_CONNECT_ERROR", details)
        self.host = host


class AuthError(SwitchSSHException):
    """SSH认证失败"""

    def __init__(self, message: str, host: str = "", details: Optional[Dict] = None):
        super().__init__(message, "SSH_AUTH_ERROR", details)
        self.host = host


class SessionSetupError(SwitchSSHException):
    """伪终端或shell创建失败"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "SESSION_SETUP_ERROR", details)


class WriteError(SwitchSSHException):
    """会话写入失败"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "SESSION_WRITE_ERROR", details)


class ReadError(SwitchSSHException):
    """会话读取失败，通常意味着远端关闭了连接"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "SESSION_READ_ERROR", details)


class SystemMonitor:
    """系统监控类"""

    def __init__(self):
        self.start_time = time.time()

    @staticmethod
    def get_system_info() -> Dict[str, Any]:
        """获取系统信息"""
        try:
            memory = psutil.virtual_memory()
            disk = psutil.disk_usage('/')
            network = psutil.net_io_counters()

            return {
                "cpu_percent": psutil.cpu_percent(interval=0.1),
                "memory_percent": memory.percent,
                "disk_percent": disk.percent,
                "memory_total": memory.total,
                "memory_available": memory.available,
                "network_bytes_sent": network.bytes_sent,
                "network_bytes_recv": network.bytes_recv,
                "timestamp": datetime.now().isoformat()
            }
        except Exception as e:
            logger.error(f"获取系统信息失败: {str(e)}")
            return {
                "error": str(e),
                "timestamp": datetime.now().isoformat()
            }

    def get_uptime(self) -> float:
        """获取服务运行时间（秒）"""
        return time.time() - self.start_time


def handle_exception(func):
    """异常处理装饰器"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (SwitchSSHException, ValueError):
            raise
        except Exception as e:
            logger.error(f"未处理的异常: {str(e)}")
            logger.debug(f"异常堆栈: {traceback.format_exc()}")
            raise SwitchSSHException(
                message=f"执行函数 {func.__name__} 时发生未知错误: {str(e)}",
                error_code="UNKNOWN_ERROR",
                details={"function": func.__name__}
            )
    return wrapper


def parse_address(address: str, default_port: int = 22):
    """解析 host:port 形式的地址，支持 [IPv6]:port"""
    if not address:
        raise ValueError("地址不能为空")

    if address.startswith("["):
        host, _, rest = address[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else ""
    elif address.count(":") == 1:
        host, port = address.split(":")
    else:
        host, port = address, ""

    if not host:
        raise ValueError(f"地址缺少主机部分: {address}")
    if not port:
        return host, default_port
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"无效的端口: {address}")
    return host, int(port)


# 全局实例
logger = SessionLogger()
system_monitor = SystemMonitor()
