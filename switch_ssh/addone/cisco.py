"""
思科设备插件
包含思科IOS设备的品牌识别关键字和输出处理参数
"""

DEVICE_CONFIG = {
    "name": "思科设备",
    "description": "思科IOS网络设备插件",
    "brand": "cisco",

    "priority": 30,
    "keywords": ["cisco"],

    "prompt_chars": [">", "#"],
    "output_filters": [],

    "device_info": {
        "vendor": "思科系统公司",
        "os_type": "IOS",
        "notes": [
            "用户模式提示符为'>'，特权模式为'#'",
        ]
    }
}
