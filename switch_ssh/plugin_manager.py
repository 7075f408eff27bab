"""
插件管理器
负责加载和管理设备品牌插件
"""

import importlib.util
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)


class PluginManager:
    """插件管理器"""

    def __init__(self, plugin_dir: str = None):
        """
        初始化插件管理器

        Args:
            plugin_dir: 插件目录路径，默认为包内的addone目录
        """
        if plugin_dir is None:
            self.plugin_dir = Path(__file__).parent / "addone"
        else:
            self.plugin_dir = Path(plugin_dir)

        self._plugins: Dict[str, Dict[str, Any]] = {}
        self._load_plugins()

    def _load_plugins(self):
        """加载所有插件"""
        if not self.plugin_dir.exists():
            logger.warning(f"插件目录不存在: {self.plugin_dir}")
            return

        for plugin_file in sorted(self.plugin_dir.glob("*.py")):
            if plugin_file.name.startswith("__"):
                continue

            plugin_name = plugin_file.stem
            try:
                spec = importlib.util.spec_from_file_location(
                    f"switch_ssh_plugin_{plugin_name}", plugin_file
                )
                if spec and spec.loader:
                    module = importlib.util.module_from_spec(spec)
                    spec.loader.exec_module(module)

                    if hasattr(module, 'DEVICE_CONFIG'):
                        config = module.DEVICE_CONFIG
                        brand = config.get("brand", plugin_name)
                        self._plugins[brand] = config
                        logger.info(f"成功加载插件: {brand}")
                    else:
                        logger.warning(f"插件 {plugin_name} 缺少 DEVICE_CONFIG 配置")

            except Exception as e:
                logger.error(f"加载插件 {plugin_name} 失败: {str(e)}")

    def get_device_config(self, brand: str) -> Optional[Dict[str, Any]]:
        """获取品牌的配置信息，不存在则返回None"""
        return self._plugins.get(brand)

    def has_plugin(self, brand: str) -> bool:
        """检查是否存在指定品牌的插件"""
        return brand in self._plugins

    def list_plugins(self) -> list:
        """列出所有可用的插件"""
        return list(self._plugins.keys())

    def brands_by_priority(self) -> List[str]:
        """按匹配优先级（数值越小越优先）返回品牌列表"""
        return sorted(
            self._plugins,
            key=lambda brand: self._plugins[brand].get("priority", 100)
        )

    def match_brand(self, text: str) -> str:
        """
        在设备输出中按优先级匹配品牌关键字

        Args:
            text: 设备返回的版本信息

        Returns:
            匹配到的品牌，未匹配返回空字符串
        """
        text = text.lower()
        for brand in self.brands_by_priority():
            keywords = self._plugins[brand].get("keywords", [brand])
            if any(keyword.lower() in text for keyword in keywords):
                return brand
        return ""

    def get_prompt_chars(self, brand: str) -> List[str]:
        """获取品牌的提示符结尾字符"""
        config = self._plugins.get(brand)
        if not config:
            return []
        return list(config.get("prompt_chars", []))

    def get_output_filters(self, brand: str) -> List[str]:
        """获取品牌需要从输出中剔除的控制序列"""
        config = self._plugins.get(brand)
        if not config:
            return []
        return list(config.get("output_filters", []))

    def reload_plugins(self):
        """重新加载所有插件"""
        self._plugins.clear()
        self._load_plugins()

    def get_plugin_info(self) -> Dict[str, Dict[str, Any]]:
        """获取所有插件的信息"""
        return self._plugins.copy()


# 全局插件管理器实例
plugin_manager = PluginManager()
