"""
华为设备插件
包含华为设备的品牌识别关键字和输出处理参数
"""

DEVICE_CONFIG = {
    "name": "华为设备",
    "description": "华为网络设备插件，支持VRP系统",
    "brand": "huawei",

    # 品牌识别：数值越小越优先匹配
    "priority": 10,
    "keywords": ["huawei"],

    "prompt_chars": ["<", ">", "[", "]"],

    # USG6360 执行 disp cur | include 时输出的光标左移序列
    "output_filters": [" [1D"],

    "device_info": {
        "vendor": "华为技术有限公司",
        "os_type": "VRP",
        "notes": [
            "用户视图提示符为<sysname>，系统视图为[sysname]",
            "分页提示为'---- More ----'，探测版本时需额外发送空格",
        ]
    }
}
