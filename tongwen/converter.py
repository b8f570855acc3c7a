#!/usr/bin/env python3
"""
简繁转换服务
先做词组级最长匹配替换，再做逐字符替换
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config.settings import Settings, get_settings
from tongwen.dictionaries.aggregator import DictionaryAggregator
from tongwen.dictionaries.sources import DictionarySource
from tongwen.models import ConversionStats, Direction, DictionaryPair

DirectionLike = Union[Direction, str]


class TongWenConverter:
    """文本简繁转换器"""

    def __init__(self, source: Optional[DictionarySource] = None, settings: Optional[Settings] = None):
        """
        初始化转换器

        Args:
            source: 词典资源；未提供时根据配置创建
            settings: 配置对象；未提供时使用全局配置
        """
        self.logger = logging.getLogger(__name__)

        if source is None:
            config = (settings or get_settings()).converter
            root = Path(config.dictionary_dir) if config.dictionary_dir else None
            source = DictionarySource(root=root, strict=config.strict_entries)

        self.aggregator = DictionaryAggregator(source)

    async def convert(self, text: str, direction: DirectionLike) -> str:
        """
        转换文本

        首次调用会等待词典加载，并发调用共享同一次加载。

        Args:
            text: 待转换文本
            direction: 's2t' 或 't2s'

        Returns:
            转换后的文本
        """
        direction = Direction.parse(direction)
        dictionaries = await self.aggregator.load_async()
        return self._apply(text, dictionaries[direction])

    def convert_sync(self, text: str, direction: DirectionLike) -> str:
        """同步转换，首次调用时阻塞直到词典加载完成"""
        direction = Direction.parse(direction)
        return self._apply(text, self.aggregator.get(direction))

    def to_traditional(self, text: str) -> str:
        """简体转繁体"""
        return self.convert_sync(text, Direction.S2T)

    def to_simplified(self, text: str) -> str:
        """繁体转简体"""
        return self.convert_sync(text, Direction.T2S)

    def _apply(self, text: str, pair: DictionaryPair) -> str:
        if not text:
            return ''

        # 1. 词组替换
        processed = pair.matcher.replace(text)

        # 2. 字符替换（str 按码位迭代，代理对字符视为一个单位）
        characters = pair.characters
        return ''.join(characters.get(char, char) for char in processed)

    def detect_script_type(self, text: str) -> str:
        """检测文本主要是简体还是繁体"""
        if not text:
            return 'unknown'

        dictionaries = self.aggregator.load()
        s2t = dictionaries[Direction.S2T].characters
        t2s = dictionaries[Direction.T2S].characters

        simplified_count = 0
        traditional_count = 0
        for char in text:
            # 只统计两种字形不同的字符
            if s2t.get(char, char) != char:
                simplified_count += 1
            elif t2s.get(char, char) != char:
                traditional_count += 1

        if traditional_count > simplified_count:
            return 'traditional'
        elif simplified_count > traditional_count:
            return 'simplified'
        elif simplified_count:
            return 'mixed'
        return 'unknown'

    def get_conversion_stats(self, original: str, converted: str) -> ConversionStats:
        """获取转换统计信息"""
        if original == converted:
            return ConversionStats(changed=0, total_chars=len(original))

        changed_count = sum(1 for o, c in zip(original, converted) if o != c)
        # 长度不同的部分都算作改动
        changed_count += abs(len(original) - len(converted))

        return ConversionStats(
            changed=changed_count,
            total_chars=len(original),
            change_rate=changed_count / len(original) if original else 0.0,
        )

    def get_dictionary_info(self) -> Dict[str, Any]:
        """获取词典信息"""
        dictionaries = self.aggregator.load()
        return {
            'dictionary_dir': str(self.aggregator.source.root),
            'strict_entries': self.aggregator.source.strict,
            'directions': {
                direction.value: {
                    'categories': list(pair.categories),
                    'phrases': len(pair.phrases),
                    'characters': len(pair.characters),
                    'max_phrase_length': pair.matcher.max_key_length,
                }
                for direction, pair in dictionaries.items()
            },
        }


# 全局实例
_converter: Optional[TongWenConverter] = None
_converter_lock = threading.Lock()


def get_converter() -> TongWenConverter:
    """获取全局转换器实例"""
    global _converter
    if _converter is None:
        with _converter_lock:
            if _converter is None:
                _converter = TongWenConverter()
    return _converter


async def convert_tongwen(text: str, direction: DirectionLike) -> str:
    """便捷转换函数（异步）"""
    return await get_converter().convert(text, direction)


def convert_text(text: str, direction: DirectionLike) -> str:
    """便捷转换函数（同步）"""
    return get_converter().convert_sync(text, direction)
