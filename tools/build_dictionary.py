#!/usr/bin/env python3
"""
词典构建工具
将制表符分隔的词表编译为转换器使用的 JSON 词典
"""

import sys
import json
import argparse
from pathlib import Path
from typing import Dict

sys.path.append(str(Path(__file__).parent.parent))

from tongwen.utils.dict_tools import create_revert_dict  # noqa: E402


def parse_word_list(content: str) -> Dict[str, str]:
    """
    解析词表

    每行一个条目: 源词<TAB>目标词；空行和以 # 开头的行被忽略。
    重复的源词以最后一次出现为准。
    """
    table = {}
    for line_no, line in enumerate(content.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        parts = line.split('\t')
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise ValueError(f"Line {line_no}: expected 'source<TAB>target', got {line!r}")

        table[parts[0].strip()] = parts[1].strip()
    return table


def build_dictionary(input_file: Path, output_file: Path, revert: bool = False) -> int:
    """编译单个词表文件"""
    try:
        table = parse_word_list(input_file.read_text(encoding='utf-8'))
        if revert:
            table = create_revert_dict(table)

        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(
            json.dumps(table, ensure_ascii=False, indent=2) + '\n',
            encoding='utf-8'
        )
        print(f"{input_file} → {output_file}: {len(table)} 条")

    except (OSError, ValueError) as e:
        print(f"构建失败: {e}", file=sys.stderr)
        return 1

    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="TongWen 词典构建工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例:
  # 编译简转繁词表
  python tools/build_dictionary.py words/general.tsv tongwen/dictionaries/data/word/general.s2t.json

  # 由同一词表生成繁转简词典
  python tools/build_dictionary.py --revert words/general.tsv tongwen/dictionaries/data/word/general.t2s.json
        """
    )

    parser.add_argument('input', help='输入词表 (TSV)')
    parser.add_argument('output', help='输出 JSON 文件')
    parser.add_argument('--revert', action='store_true', help='输出反向映射')

    args = parser.parse_args(argv)

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"输入文件不存在: {input_path}", file=sys.stderr)
        return 1

    return build_dictionary(input_path, Path(args.output), revert=args.revert)


if __name__ == "__main__":
    sys.exit(main())
