"""
FastAPI接口模块
提供交换机指令执行和品牌查询的API接口
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Dict, Any

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import settings
from .plugin_manager import plugin_manager
from .runner import run_commands_detailed, get_ssh_brand
from .session_manager import session_manager
from .utils import logger, system_monitor, SwitchSSHException, AuthError, ConnectError


class SwitchCredentialsRequest(BaseModel):
    """交换机凭据请求模型"""
    username: str = Field(..., description="SSH用户名")
    password: str = Field(..., description="SSH密码")
    address: str = Field(..., description="交换机地址，host:port", examples=["192.168.1.1:22"])


class RunCommandsRequest(SwitchCredentialsRequest):
    """指令执行请求模型"""
    brand: str = Field("", description="交换机品牌（可为空）")
    commands: List[str] = Field(..., description="要执行的指令", min_length=1, max_length=50)


class RunCommandsResponse(BaseModel):
    """指令执行响应模型"""
    success: bool
    timestamp: datetime
    execution_time: float
    output: str
    brand: str = ""


class BrandResponse(BaseModel):
    """品牌查询响应模型"""
    success: bool
    brand: str
    timestamp: datetime


class HealthResponse(BaseModel):
    """健康检查响应模型"""
    status: str
    timestamp: datetime
    version: str
    uptime: float
    sessions: int
    system_info: Dict[str, Any]


app = FastAPI(
    title="交换机SSH指令执行API",
    description="通过交互式SSH会话在多品牌交换机上执行指令",
    version=settings.app_version,
)

# 指令执行专用线程池，与事件循环的默认线程池隔离
executor = ThreadPoolExecutor(max_workers=settings.api_max_workers, thread_name_prefix="switch-ssh-api")


@app.get("/", response_model=Dict[str, str])
async def root():
    """根路径"""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "status": "运行中"
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """健康检查接口"""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(),
        version=settings.app_version,
        uptime=system_monitor.get_uptime(),
        sessions=session_manager.session_count(),
        system_info=system_monitor.get_system_info(),
    )


@app.post("/run", response_model=RunCommandsResponse)
async def run(request: RunCommandsRequest):
    """
    指令执行接口

    同一交换机身份的请求会排队执行，不同身份之间并行
    """
    start_time = datetime.now()
    logger.info(f"执行指令: {request.username}@{request.address}, 指令数: {len(request.commands)}")

    output, brand_name = await asyncio.get_running_loop().run_in_executor(
        executor,
        lambda: run_commands_detailed(
            request.username, request.password, request.address, request.brand, *request.commands
        )
    )

    return RunCommandsResponse(
        success=True,
        timestamp=start_time,
        execution_time=(datetime.now() - start_time).total_seconds(),
        output=output,
        brand=brand_name,
    )


@app.post("/brand", response_model=BrandResponse)
async def brand(request: SwitchCredentialsRequest):
    """交换机品牌查询接口"""
    result = await asyncio.get_running_loop().run_in_executor(
        executor, get_ssh_brand, request.username, request.password, request.address
    )
    return BrandResponse(success=bool(result), brand=result, timestamp=datetime.now())


@app.get("/sessions")
async def list_sessions():
    """列出缓存的会话"""
    return {
        "sessions": session_manager.list_sessions(),
        "timestamp": datetime.now().isoformat()
    }


def _brand_info(name: str, config: Dict[str, Any]) -> Dict[str, Any]:
    device_info = config.get("device_info", {})
    return {
        "brand": name,
        "description": config.get("name", name),
        "vendor": device_info.get("vendor", ""),
        "os_type": device_info.get("os_type", ""),
        "prompt_chars": config.get("prompt_chars", []),
    }


@app.get("/supported-brands")
async def supported_brands():
    """获取支持识别的品牌列表"""
    return {
        "supported_brands": [
            _brand_info(name, plugin_manager.get_device_config(name))
            for name in plugin_manager.brands_by_priority()
        ]
    }


@app.exception_handler(SwitchSSHException)
async def switch_ssh_exception_handler(request, exc: SwitchSSHException):
    """异常处理器"""
    logger.error(f"请求失败: {exc.message}")
    if isinstance(exc, AuthError):
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, ConnectError):
        status_code = status.HTTP_502_BAD_GATEWAY
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": exc.message,
            "error_code": exc.error_code,
            "timestamp": datetime.now().isoformat()
        }
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    """参数错误处理器"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": str(exc),
            "timestamp": datetime.now().isoformat()
        }
    )
