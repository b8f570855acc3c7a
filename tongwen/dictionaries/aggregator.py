import asyncio
import logging
import threading
from typing import Dict, Optional

from tongwen.dictionaries.sources import DictionarySource
from tongwen.exceptions import InitializationError
from tongwen.matcher import PhraseMatcher
from tongwen.models import Direction, DictionaryPair
from tongwen.utils.dict_tools import join_dicts


class DictionaryAggregator:
    """词典聚合器

    按固定类别顺序合并各方向的词组表，并与字符表一起发布。整个进程内只
    加载一次：并发调用者等待同一次加载，失败结果会被缓存并原样抛给之后
    的所有调用者，不会自动重试。
    """

    def __init__(self, source: Optional[DictionarySource] = None):
        self.source = source or DictionarySource()
        self.logger = logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._dictionaries: Optional[Dict[Direction, DictionaryPair]] = None
        self._error: Optional[InitializationError] = None

    @property
    def is_loaded(self) -> bool:
        return self._dictionaries is not None

    def load(self) -> Dict[Direction, DictionaryPair]:
        """
        加载并合并全部方向的词典（幂等、线程安全）

        Returns:
            方向到 DictionaryPair 的映射

        Raises:
            InitializationError: 词典资源缺失或损坏
        """
        dictionaries = self._dictionaries
        if dictionaries is not None:
            return dictionaries

        with self._lock:
            if self._dictionaries is not None:
                return self._dictionaries
            if self._error is not None:
                raise self._error

            try:
                built = {direction: self._build(direction) for direction in Direction}
            except InitializationError as e:
                self._error = e
                self.logger.error(f"Dictionary initialization failed: {e}")
                raise
            except Exception as e:
                self._error = InitializationError(f"Dictionary initialization failed: {e}")
                self.logger.error(str(self._error))
                raise self._error from e

            # 两个方向一起发布
            self._dictionaries = built
            return built

    async def load_async(self) -> Dict[Direction, DictionaryPair]:
        """异步等待一次性加载，已加载时不挂起"""
        if self._dictionaries is not None:
            return self._dictionaries
        return await asyncio.to_thread(self.load)

    def get(self, direction: Direction) -> DictionaryPair:
        return self.load()[direction]

    def _build(self, direction: Direction) -> DictionaryPair:
        characters = self.source.character_table(direction)

        tables = self.source.phrase_tables(direction)
        phrases = join_dicts(table for _, table in tables)
        categories = tuple(category for category, _ in tables)

        self.logger.info(
            f"Loaded {direction.value} dictionaries: {len(phrases)} phrases "
            f"from {len(categories)} categories, {len(characters)} characters"
        )

        # 词组替换结果还会经过字符表
        unstable = [key for key, value in phrases.items() if any(ch in characters for ch in value)]
        if unstable:
            self.logger.warning(
                f"{len(unstable)} {direction.value} phrase values are rewritten by the character table, "
                f"e.g. {unstable[:5]}"
            )

        return DictionaryPair(
            direction=direction,
            phrases=phrases,
            characters=characters,
            matcher=PhraseMatcher(phrases),
            categories=categories,
        )

    def loaded_categories(self) -> Dict[str, list]:
        """已加载的类别列表（未加载时为空）"""
        if self._dictionaries is None:
            return {}
        return {
            direction.value: list(pair.categories)
            for direction, pair in self._dictionaries.items()
        }
