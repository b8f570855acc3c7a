class TongWenError(Exception):
    """简繁转换相关异常的基类"""


class InitializationError(TongWenError):
    """词典资源缺失或损坏，进程生命周期内不会自动重试"""


class InvalidDirectionError(TongWenError, ValueError):
    """转换方向不在 s2t / t2s 之内"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Unsupported conversion direction: {value!r} (expected 's2t' or 't2s')")
