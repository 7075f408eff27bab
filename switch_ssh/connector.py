"""
SSH传输连接模块
基于paramiko建立到交换机的SSH连接，并打开带伪终端的会话通道
"""
import socket
from dataclasses import dataclass
from typing import Optional

import paramiko

from .config import settings
from .utils import logger as default_logger, parse_address, ConnectError, AuthError, SessionSetupError


@dataclass
class ShellTransport:
    """已认证的SSH连接及其会话通道"""
    client: paramiko.SSHClient
    channel: paramiko.Channel
    address: str = ""

    def close(self):
        """关闭会话通道和底层连接"""
        try:
            self.channel.close()
        finally:
            self.client.close()


def connect(user: str, password: str, address: str,
            timeout: Optional[float] = None, logger=None) -> ShellTransport:
    """
    连接交换机并打开会话通道

    不校验远端主机密钥（接受任何主机身份），仅支持密码认证。

    Args:
        user: 用户名
        password: 密码
        address: 交换机地址，host:port
        timeout: 连接超时时间，默认20秒

    Returns:
        已申请伪终端的ShellTransport
    """
    logger = logger or default_logger
    timeout = timeout or settings.ssh_connect_timeout
    host, port = parse_address(address)

    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    logger.debug(f"开始连接: {user}@{host}:{port}")
    try:
        client.connect(
            hostname=host,
            port=port,
            username=user,
            password=password,
            timeout=timeout,
            banner_timeout=timeout,
            auth_timeout=timeout,
            look_for_keys=False,
            allow_agent=False,
        )
    except paramiko.AuthenticationException as e:
        client.close()
        error_msg = f"SSH认证失败: {str(e)}"
        logger.error(error_msg)
        raise AuthError(error_msg, host=host, details={"address": address})
    except (socket.timeout, paramiko.SSHException, OSError) as e:
        client.close()
        error_msg = f"SSH连接失败: {str(e)}"
        logger.error(error_msg)
        raise ConnectError(error_msg, host=host, details={"address": address})
    logger.debug(f"连接成功: {user}@{host}:{port}")

    try:
        channel = client.get_transport().open_session(timeout=timeout)
        channel.get_pty(
            term=settings.ssh_term_type,
            width=settings.ssh_term_width,
            height=settings.ssh_term_height,
        )
    except (paramiko.SSHException, OSError, AttributeError) as e:
        client.close()
        error_msg = f"创建会话通道失败: {str(e)}"
        logger.error(error_msg)
        raise SessionSetupError(error_msg, details={"address": address})
    logger.debug(f"会话通道已打开: {host}:{port}")

    return ShellTransport(client=client, channel=channel, address=address)
