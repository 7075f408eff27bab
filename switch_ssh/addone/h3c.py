"""
H3C设备插件
包含H3C/HP Comware设备的品牌识别关键字和输出处理参数
"""

DEVICE_CONFIG = {
    "name": "H3C设备",
    "description": "H3C/HP Comware网络设备插件",
    "brand": "h3c",

    # 华为设备的版本信息中可能出现H3C字样，因此优先级低于华为
    "priority": 20,
    "keywords": ["h3c"],

    "prompt_chars": ["<", ">", "[", "]"],
    "output_filters": [],

    "device_info": {
        "vendor": "新华三技术有限公司",
        "os_type": "Comware",
        "notes": [
            "与华为设备的指令体系基本一致，使用display系列指令",
        ]
    }
}
