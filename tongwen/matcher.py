from typing import Dict, Mapping, Optional, Tuple


class _TrieNode:
    __slots__ = ('children', 'value')

    def __init__(self):
        self.children: Dict[str, '_TrieNode'] = {}
        self.value: Optional[str] = None


class PhraseMatcher:
    """词组最长匹配器

    在词组表的键上构建一棵按码位展开的字典树，扫描时在每个位置取最长的
    命中键并整体替换，替换后从被消耗片段之后继续扫描。键按字面处理，
    不经过正则编译。

    同一起点上的候选键长度必然不同（合并后键唯一），较长者胜出；
    起点不同的候选之间，靠左者优先，即使靠右的键更长。
    """

    def __init__(self, phrases: Mapping[str, str]):
        self._root = _TrieNode()
        self._size = 0
        self.max_key_length = 0

        for key, value in phrases.items():
            self._insert(key, value)

    def _insert(self, key: str, value: str) -> None:
        node = self._root
        for char in key:
            node = node.children.setdefault(char, _TrieNode())
        if node.value is None:
            self._size += 1
        node.value = value
        self.max_key_length = max(self.max_key_length, len(key))

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: str) -> bool:
        node = self._root
        for char in key:
            node = node.children.get(char)
            if node is None:
                return False
        return node.value is not None

    def longest_match(self, text: str, start: int = 0) -> Optional[Tuple[int, str]]:
        """
        查找从 start 开始的最长命中键

        Args:
            text: 待扫描文本
            start: 起始位置（码位下标）

        Returns:
            (键长度, 替换值)，无命中时返回 None
        """
        node = self._root
        best = None
        for index in range(start, len(text)):
            node = node.children.get(text[index])
            if node is None:
                break
            if node.value is not None:
                best = (index - start + 1, node.value)
        return best

    def replace(self, text: str) -> str:
        """从左到右进行非重叠的最长匹配替换，未命中的字符原样保留"""
        if not text or not self._size:
            return text

        parts = []
        position = 0
        length = len(text)
        while position < length:
            match = self.longest_match(text, position)
            if match is None:
                parts.append(text[position])
                position += 1
            else:
                consumed, replacement = match
                parts.append(replacement)
                position += consumed
        return ''.join(parts)
