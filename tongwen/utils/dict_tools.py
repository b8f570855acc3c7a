from typing import Dict, Iterable, Mapping


def join_dicts(dicts: Iterable[Mapping[str, str]]) -> Dict[str, str]:
    """按顺序合并多个映射表，键冲突时后者覆盖前者"""
    merged: Dict[str, str] = {}
    for table in dicts:
        merged.update(table)
    return merged


def create_revert_dict(table: Mapping[str, str]) -> Dict[str, str]:
    """生成反向映射表；多个键映射到同一个值时，后出现的键胜出"""
    return {value: key for key, value in table.items()}
