"""
结果过滤模块
去除设备返回结果中回显指令之前的内容以及终端退格等杂质，
不对输出内容做任何语义解析
"""
from typing import Iterable, List

from .plugin_manager import plugin_manager
from .utils import logger

# " \b" 为退格产生的杂质；" [1D" 为华为USG6360分页渲染的光标左移序列
DEFAULT_STRIP_SEQUENCES = (" \b", " [1D")


def sanitizer_for_brand(brand: str) -> List[str]:
    """获取品牌对应的剔除序列：默认序列加上插件声明的序列"""
    sequences = list(DEFAULT_STRIP_SEQUENCES)
    for sequence in plugin_manager.get_output_filters(brand) if brand else []:
        if sequence not in sequences:
            sequences.append(sequence)
    return sequences


def filter_result(result: str, first_cmd: str,
                  strip_sequences: Iterable[str] = DEFAULT_STRIP_SEQUENCES) -> str:
    """
    对交换机执行的结果进行过滤

    从包含第一条指令的行开始截取，之前的登录信息、残留提示符等全部丢弃。

    Args:
        result: 返回的执行结果（可能包含脏数据）
        first_cmd: 执行的第一条指令
        strip_sequences: 每行需要剔除的字符序列

    Returns:
        过滤后的结果；若没有找到指令，原样返回
    """
    strip_sequences = tuple(strip_sequences)
    lines = []
    find_cmd = False

    for line in result.split("\n"):
        for sequence in strip_sequences:
            line = line.replace(sequence, "")

        if find_cmd:
            lines.append(line)
            continue

        index = line.find(first_cmd)
        if index >= 0:
            find_cmd = True
            prompt = line[:index].replace("\r", "").strip()
            logger.debug(f"Find prompt='{prompt}'")
            lines.append(line)

    if not find_cmd:
        return result
    return "".join(line + "\n" for line in lines)
