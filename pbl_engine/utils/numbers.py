"""数值工具。"""

import math


def round_half_up(value: float) -> int:
    """四舍五入到整数（0.5 向上），避免内置 ``round`` 的银行家舍入。"""

    return int(math.floor(value + 0.5))


def percentage(part: float, whole: float) -> int:
    """``round(100 * part / whole)``，分母为 0 时返回 0。"""

    if not whole:
        return 0
    return round_half_up(100 * part / whole)
