"""
Switch SSH - 多品牌交换机交互式SSH指令执行

通过交互式shell会话在华为、H3C、思科等交换机上执行指令，
以空闲超时判断指令输出结束，并缓存会话以便复用。
"""

from .runner import run_commands, run_commands_with_brand, run_commands_detailed, get_ssh_brand
from .session import SSHSession, SessionState
from .session_manager import SessionManager, session_manager
from .result_filter import filter_result

__version__ = "1.0.0"
__all__ = [
    "run_commands",
    "run_commands_with_brand",
    "run_commands_detailed",
    "get_ssh_brand",
    "SSHSession",
    "SessionState",
    "SessionManager",
    "session_manager",
    "filter_result",
]
