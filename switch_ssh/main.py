"""
服务主入口文件
启动HTTP服务，并管理会话回收线程的生命周期
"""
import sys
from contextlib import asynccontextmanager

import uvicorn

from .api import app, executor
from .config import settings
from .session_manager import session_manager
from .utils import logger


@asynccontextmanager
async def lifespan(app):
    """FastAPI生命周期管理"""
    logger.info("启动会话回收线程...")
    session_manager.start_cleanup()
    try:
        yield
    finally:
        logger.info("关闭所有会话...")
        session_manager.shutdown()
        executor.shutdown(wait=False)


# 将生命周期管理器绑定到FastAPI应用
app.router.lifespan_context = lifespan


def main():
    """主函数"""
    try:
        logger.info(f"启动HTTP服务器: http://{settings.service_host}:{settings.service_port}")
        uvicorn.run(
            app,
            host=settings.service_host,
            port=settings.service_port,
            log_level="debug" if settings.debug else "info",
        )
    except KeyboardInterrupt:
        logger.info("收到中断信号，正在关闭...")
    except Exception as e:
        logger.error(f"服务运行异常: {str(e)}")
        sys.exit(1)
    finally:
        logger.info("服务已退出")


if __name__ == "__main__":
    main()
