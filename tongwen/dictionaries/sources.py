import json
import logging
import unicodedata
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from tongwen.exceptions import InitializationError
from tongwen.models import Direction

logger = logging.getLogger(__name__)

# 内置字符表不收录一简对多繁的字（s2t 的 后 几 准 于，t2s 的 乾 著 瞭），
# 这些字只在词组表列出的词中转换，单独出现时保持原样
BUNDLED_DATA_DIR = Path(__file__).parent / 'data'

# 合并顺序固定，后合并的类别在键冲突时覆盖先合并的类别
CATEGORY_ORDER = (
    'entertainment',
    'general',
    'it',
    'person',
    'place',
    'punctuation',
    'science',
    'unit',
)

# t2s 没有 unit 词表：缺失即不覆盖，不自动生成反向表
DIRECTION_CATEGORIES: Dict[Direction, Tuple[str, ...]] = {
    Direction.S2T: CATEGORY_ORDER,
    Direction.T2S: tuple(c for c in CATEGORY_ORDER if c != 'unit'),
}

KIND_CHAR = 'char'
KIND_PHRASE = 'phrase'


def load_table(path: Path) -> Dict:
    """
    读取一个 JSON 映射表

    Args:
        path: JSON 文件路径

    Returns:
        解析后的字典（尚未校验条目）

    Raises:
        InitializationError: 文件缺失、无法解析或顶层不是对象
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise InitializationError(f"Dictionary file not found: {path}") from e
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InitializationError(f"Failed to read dictionary file {path}: {e}") from e

    if not isinstance(data, dict):
        raise InitializationError(
            f"Dictionary file {path} must contain a JSON object, got {type(data).__name__}"
        )
    return data


def _has_control_char(text: str) -> bool:
    return any(unicodedata.category(ch) == 'Cc' for ch in text)


def _entry_problem(key, value, kind: str) -> Optional[str]:
    """返回条目的问题描述，合法条目返回 None"""
    if not isinstance(key, str) or not isinstance(value, str):
        return 'key and value must be strings'
    if not key:
        return 'empty key'
    if not value:
        return 'empty value'
    if _has_control_char(key) or _has_control_char(value):
        return 'control character'
    if kind == KIND_CHAR and (len(key) != 1 or len(value) != 1):
        return 'character entries must map one code point to one code point'
    return None


def sanitize_entries(table: Mapping, kind: str, source: str, strict: bool = False) -> Dict[str, str]:
    """
    在加载阶段校验条目，丢弃非法条目

    Args:
        table: 原始映射表
        kind: 'char' 或 'phrase'
        source: 来源描述，用于日志
        strict: 为 True 时遇到非法条目直接抛出 InitializationError

    Returns:
        只包含合法条目的新字典
    """
    clean: Dict[str, str] = {}
    dropped = 0

    for key, value in table.items():
        problem = _entry_problem(key, value, kind)
        if problem is None:
            clean[key] = value
            continue

        if strict:
            raise InitializationError(f"Invalid entry {key!r} -> {value!r} in {source}: {problem}")
        logger.warning(f"Dropping invalid entry {key!r} -> {value!r} in {source}: {problem}")
        dropped += 1

    if dropped:
        logger.warning(f"Dropped {dropped} invalid entries from {source}")
    return clean


class DictionarySource:
    """按类别和方向组织的词典资源"""

    def __init__(self, root: Optional[Path] = None, strict: bool = False):
        """
        Args:
            root: 词典根目录，包含 char/ 与 word/ 子目录；默认使用内置数据
            strict: 遇到非法条目时是否直接失败
        """
        self.root = Path(root) if root is not None else BUNDLED_DATA_DIR
        self.strict = strict
        self.logger = logging.getLogger(__name__)

    def categories(self, direction: Direction) -> Tuple[str, ...]:
        return DIRECTION_CATEGORIES[direction]

    def character_path(self, direction: Direction) -> Path:
        return self.root / 'char' / f'{direction.value}.json'

    def phrase_path(self, category: str, direction: Direction) -> Path:
        return self.root / 'word' / f'{category}.{direction.value}.json'

    def character_table(self, direction: Direction) -> Dict[str, str]:
        """读取某个方向的字符表"""
        path = self.character_path(direction)
        table = sanitize_entries(load_table(path), KIND_CHAR, str(path), self.strict)
        self.logger.debug(f"Loaded {len(table)} character entries from {path}")
        return table

    def phrase_tables(self, direction: Direction) -> List[Tuple[str, Dict[str, str]]]:
        """按固定类别顺序读取某个方向的全部词组表"""
        tables = []
        for category in self.categories(direction):
            path = self.phrase_path(category, direction)
            table = sanitize_entries(load_table(path), KIND_PHRASE, str(path), self.strict)
            self.logger.debug(f"Loaded {len(table)} phrase entries from {path}")
            tables.append((category, table))
        return tables
