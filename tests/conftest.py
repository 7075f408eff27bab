"""
测试公共夹具
用脚本化的假通道代替真实的paramiko会话通道
"""
import os
import queue
import sys
import time

import pytest

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from switch_ssh.config import settings


class FakeChannel:
    """模拟交换机shell的通道：记录写入的指令，按脚本返回输出"""

    def __init__(self, responder=None, banner: str = ""):
        self.responder = responder
        self.banner = banner
        self.sent = []
        self.raw_sent = []
        self.closed = False
        self.shell_invoked = False
        self.fail_send = False
        self.recv_sizes = []
        self._output = queue.Queue()

    def feed(self, data):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._output.put(data)

    def hang_up(self):
        """模拟远端关闭连接"""
        self._output.put(None)

    def invoke_shell(self):
        self.shell_invoked = True
        if self.banner:
            self.feed(self.banner)

    def sendall(self, data: bytes):
        if self.closed or self.fail_send:
            raise OSError("Socket is closed")
        self.raw_sent.append(data)
        cmd = data.decode("utf-8")
        if cmd.endswith("\n"):
            cmd = cmd[:-1]
        self.sent.append(cmd)
        if self.responder:
            response = self.responder(cmd)
            if response:
                self.feed(response)

    def recv(self, n: int) -> bytes:
        self.recv_sizes.append(n)
        data = self._output.get()
        if data is None:
            return b""
        return data[:n]

    def close(self):
        if not self.closed:
            self.closed = True
            self.hang_up()


class FakeTransport:
    """模拟ShellTransport"""

    def __init__(self, channel: FakeChannel):
        self.channel = channel
        self.close_count = 0

    def close(self):
        self.close_count += 1
        self.channel.close()


def wait_for(condition, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """等待条件成立"""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(interval)
    return condition()


def switch_responder(prompt: str = "<sw1>", outputs: dict = None):
    """回显指令，返回预设输出，再打印提示符"""
    outputs = outputs or {}

    def respond(cmd: str) -> str:
        body = outputs.get(cmd, "")
        if body:
            return f"{cmd}\r\n{body}\r\n{prompt}"
        return f"{cmd}\r\n{prompt}"
    return respond


@pytest.fixture(autouse=True)
def fast_timeouts(monkeypatch):
    """缩短读取超时，加快测试"""
    monkeypatch.setattr(settings, "ssh_login_idle_timeout", 0.2)
    monkeypatch.setattr(settings, "ssh_command_idle_timeout", 0.3)
    monkeypatch.setattr(settings, "ssh_brand_idle_timeout", 0.3)
    monkeypatch.setattr(settings, "ssh_check_idle_timeout", 0.3)


@pytest.fixture
def fake_channel():
    return FakeChannel(responder=switch_responder(), banner="Info: welcome\r\n<sw1>")


@pytest.fixture
def fake_transport(fake_channel):
    return FakeTransport(fake_channel)
