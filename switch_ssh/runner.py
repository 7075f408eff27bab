"""
指令执行入口
完成获取会话（不存在则创建并缓存）、执行指令、过滤结果的完整流程
"""
from typing import Tuple

from .config import settings
from .result_filter import filter_result
from .session_manager import session_manager, session_key
from .utils import logger, handle_exception


@handle_exception
def run_commands(user: str, password: str, address: str, *cmds: str) -> str:
    """
    在交换机上执行指令并返回过滤后的结果

    Args:
        user: 用户名
        password: 密码
        address: 交换机地址，host:port
        cmds: 执行的指令（可以多个）
    """
    return run_commands_with_brand(user, password, address, "", *cmds)


@handle_exception
def run_commands_with_brand(user: str, password: str, address: str, brand: str, *cmds: str) -> str:
    """
    在交换机上执行指令并返回过滤后的结果

    Args:
        brand: 交换机品牌（可为空），新建会话时直接使用，不再探测
    """
    output, _ = run_commands_detailed(user, password, address, brand, *cmds)
    return output


@handle_exception
def run_commands_detailed(user: str, password: str, address: str, brand: str, *cmds: str) -> Tuple[str, str]:
    """
    执行指令，同时返回会话缓存的品牌

    Returns:
        (过滤后的结果, 品牌)，品牌未知时为空字符串
    """
    if not cmds:
        raise ValueError("至少需要一条指令")

    key = session_key(user, password, address)
    with session_manager.session_lock(key):
        try:
            session = session_manager.get_session(user, password, address, brand)
        except Exception as e:
            logger.error(f"获取会话失败 {user}@{address}: {str(e)}")
            raise
        session.write_commands(*cmds)
        result = session.read_until_idle(settings.ssh_command_idle_timeout)
        return filter_result(result, cmds[0], session.output_filters()), session.brand


@handle_exception
def get_ssh_brand(user: str, password: str, address: str) -> str:
    """
    获取交换机的品牌

    Returns:
        huawei、h3c、cisco，无法识别时返回空字符串
    """
    key = session_key(user, password, address)
    with session_manager.session_lock(key):
        try:
            session = session_manager.get_session(user, password, address)
        except Exception as e:
            logger.error(f"获取会话失败 {user}@{address}: {str(e)}")
            raise
        return session.get_vendor_brand()
