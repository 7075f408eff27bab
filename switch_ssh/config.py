"""
配置管理模块
通过环境变量加载配置信息
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置类"""

    # 基础配置
    app_name: str = "Switch SSH"
    app_version: str = "1.0.0"
    debug: bool = False  # 是否输出详细的调试跟踪日志

    # 服务配置
    service_host: str = "0.0.0.0"
    service_port: int = 8000

    # SSH连接配置
    ssh_connect_timeout: int = 20
    ssh_term_type: str = "vt100"
    ssh_term_width: int = 80
    ssh_term_height: int = 40
    ssh_encoding: str = "utf-8"
    ssh_read_buffer_size: int = 64 * 1024

    # 读取超时配置（秒）
    ssh_login_idle_timeout: float = 1.0    # 登录后等待提示符
    ssh_command_idle_timeout: float = 2.0  # 执行指令后等待输出
    ssh_brand_idle_timeout: float = 1.0    # 品牌探测
    ssh_check_idle_timeout: float = 2.0    # 会话可用性检查

    # 会话缓存配置
    session_idle_timeout: int = 600       # 超过该时间未使用的会话会被回收
    session_cleanup_interval: int = 60    # 回收线程的检查间隔

    # 接口线程池配置
    api_max_workers: int = 64  # 阻塞在SSH会话上的请求各占一个线程

    # 日志配置
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_prefix = "SWITCH_SSH_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# 全局配置实例
settings = Settings()
