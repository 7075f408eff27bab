"""
插件系统测试
"""
import textwrap

import pytest

from switch_ssh.plugin_manager import PluginManager, plugin_manager


class TestBuiltinPlugins:
    """内置品牌插件"""

    def test_builtin_brands(self):
        assert set(plugin_manager.list_plugins()) == {"huawei", "h3c", "cisco"}

    def test_priority_order(self):
        assert plugin_manager.brands_by_priority() == ["huawei", "h3c", "cisco"]

    @pytest.mark.parametrize("text, brand", [
        ("Huawei Versatile Routing Platform", "huawei"),
        ("H3C Comware Platform Software", "h3c"),
        ("Cisco IOS Software", "cisco"),
        ("H3C ... HUAWEI", "huawei"),
        ("Juniper JUNOS", ""),
        ("", ""),
    ])
    def test_match_brand(self, text, brand):
        assert plugin_manager.match_brand(text) == brand

    def test_prompt_chars(self):
        assert plugin_manager.get_prompt_chars("cisco") == [">", "#"]
        assert "[" in plugin_manager.get_prompt_chars("huawei")
        assert plugin_manager.get_prompt_chars("unknown") == []

    def test_output_filters(self):
        assert plugin_manager.get_output_filters("huawei") == [" [1D"]
        assert plugin_manager.get_output_filters("unknown") == []


class TestPluginDirectory:
    """插件目录加载"""

    def test_loads_custom_plugins(self, tmp_path):
        (tmp_path / "juniper.py").write_text(textwrap.dedent("""
            DEVICE_CONFIG = {
                "name": "Juniper设备",
                "brand": "juniper",
                "priority": 5,
                "keywords": ["junos"],
                "output_filters": ["---(more)---"],
            }
        """))
        (tmp_path / "no_config.py").write_text("VALUE = 1\n")
        (tmp_path / "broken.py").write_text("raise RuntimeError('broken plugin')\n")
        (tmp_path / "__init__.py").write_text("")

        manager = PluginManager(str(tmp_path))

        assert manager.list_plugins() == ["juniper"]
        assert manager.match_brand("JUNOS 12.3R6") == "juniper"
        assert manager.get_output_filters("juniper") == ["---(more)---"]
        assert manager.get_device_config("juniper")["name"] == "Juniper设备"

    def test_missing_directory(self, tmp_path):
        manager = PluginManager(str(tmp_path / "missing"))

        assert manager.list_plugins() == []
        assert manager.match_brand("huawei") == ""

    def test_reload_plugins(self, tmp_path):
        manager = PluginManager(str(tmp_path))
        assert not manager.has_plugin("arista")

        (tmp_path / "arista.py").write_text('DEVICE_CONFIG = {"brand": "arista", "keywords": ["arista"]}\n')
        manager.reload_plugins()

        assert manager.has_plugin("arista")
        assert "arista" in manager.get_plugin_info()
