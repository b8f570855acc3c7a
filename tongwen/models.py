from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from tongwen.exceptions import InvalidDirectionError
from tongwen.matcher import PhraseMatcher


class Direction(str, Enum):
    """转换方向"""
    S2T = 's2t'
    T2S = 't2s'

    @property
    def long_name(self) -> str:
        return 'simplified-to-traditional' if self is Direction.S2T else 'traditional-to-simplified'

    @classmethod
    def parse(cls, value: Union['Direction', str]) -> 'Direction':
        """
        解析转换方向

        接受 Direction 实例、短代码 (s2t/t2s) 或完整名称
        (simplified-to-traditional/traditional-to-simplified)。
        其余取值一律抛出 InvalidDirectionError，不做默认回退。
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if normalized in (member.value, member.long_name):
                    return member
        raise InvalidDirectionError(value)


@dataclass(frozen=True)
class DictionaryPair:
    """单一方向的词组表与字符表，加载后只读"""
    direction: Direction
    phrases: Mapping[str, str]
    characters: Mapping[str, str]
    matcher: PhraseMatcher
    categories: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # 对外只暴露只读视图
        if not isinstance(self.phrases, MappingProxyType):
            object.__setattr__(self, 'phrases', MappingProxyType(dict(self.phrases)))
        if not isinstance(self.characters, MappingProxyType):
            object.__setattr__(self, 'characters', MappingProxyType(dict(self.characters)))


@dataclass
class ConversionStats:
    """转换统计信息"""
    changed: int
    total_chars: int
    change_rate: float = 0.0
