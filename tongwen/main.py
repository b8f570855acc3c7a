#!/usr/bin/env python3
"""
TongWen 主入口文件
文本简繁转换命令行工具
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config.settings import Settings, get_settings, reload_settings
from tongwen.converter import TongWenConverter
from tongwen.exceptions import TongWenError
from tongwen.models import Direction


def setup_logging(log_level: str = "INFO") -> None:
    """设置日志配置"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


class TongWenProcessor:
    """TongWen 文件处理器"""

    def __init__(self, settings: Optional[Settings] = None):
        """初始化处理器"""
        self.settings = settings or get_settings()
        self.logger = logging.getLogger(__name__)
        self.converter = TongWenConverter(settings=self.settings)

    def read_file(self, input_file: Path) -> Optional[str]:
        """读取 UTF-8 文本，失败时记录错误并返回 None"""
        try:
            return input_file.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"Failed to read {input_file}: {e}")
            return None

    def write_file(self, output_file: Path, content: str) -> bool:
        """写出 UTF-8 文本，失败时记录错误并返回 False"""
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(content, encoding='utf-8')
        except OSError as e:
            self.logger.error(f"Failed to write {output_file}: {e}")
            return False
        return True

    async def convert_file(self, input_file: Path, output_file: Path, direction: Direction) -> bool:
        """转换单个文件"""
        content = self.read_file(input_file)
        if content is None:
            return False

        converted = await self.converter.convert(content, direction)
        if not self.write_file(output_file, converted):
            return False

        stats = self.converter.get_conversion_stats(content, converted)
        self.logger.info(
            f"{direction.value}: {input_file} -> {output_file} "
            f"({stats.changed}/{stats.total_chars} characters changed)"
        )
        return True

    async def convert_directory(self, input_dir: Path, output_dir: Path, direction: Direction) -> int:
        """批量转换目录，返回失败的文件数"""
        files: List[Path] = []
        for pattern in self.settings.converter.file_patterns:
            files.extend(input_dir.glob(pattern))
        files = sorted(set(files))

        if not files:
            self.logger.warning(f"No files matching {self.settings.converter.file_patterns} in {input_dir}")
            return 0

        output_dir.mkdir(parents=True, exist_ok=True)
        results = await asyncio.gather(
            *(self.convert_file(path, output_dir / path.name, direction) for path in files)
        )

        failed = results.count(False)
        self.logger.info(f"Batch conversion finished: {len(files) - failed}/{len(files)} files")
        return failed

    def get_system_info(self) -> dict:
        """获取系统信息"""
        return {
            "dictionaries": self.converter.get_dictionary_info(),
            "settings": self.settings.to_dict(),
        }


def parse_args(argv: Optional[List[str]] = None):
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description="TongWen: 中文简繁转换工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 简体转繁体
  tongwen --to-traditional input.txt output.txt

  # 繁体转简体，直接转换字符串
  tongwen --to-simplified --text "頭髮"

  # 批量转换目录下所有 .txt / .md 文件
  tongwen --direction s2t docs/ converted/

  # 从标准输入读取
  echo "头发" | tongwen --to-traditional
        """
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument('--to-traditional', action='store_true', help='简体转繁体 (s2t)')
    group.add_argument('--to-simplified', action='store_true', help='繁体转简体 (t2s)')
    group.add_argument('--direction', '-d', choices=[d.value for d in Direction], help='转换方向')

    parser.add_argument('input', nargs='?', help='输入文件或目录，省略时读取标准输入')
    parser.add_argument('output', nargs='?', help='输出文件或目录，省略时写到标准输出')

    parser.add_argument('--text', '-t', type=str, help='直接转换给定字符串')
    parser.add_argument('--detect', action='store_true', help='检测文本是简体还是繁体')
    parser.add_argument('--info', action='store_true', help='显示词典与配置信息')
    parser.add_argument('--config', '-c', type=str, help='YAML 配置文件路径')

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='日志级别 (default: 配置中的 log_level)'
    )

    return parser.parse_args(argv)


def resolve_direction(args, settings: Settings) -> Direction:
    """根据命令行参数和配置确定转换方向"""
    if args.to_traditional:
        return Direction.S2T
    if args.to_simplified:
        return Direction.T2S
    if args.direction:
        return Direction.parse(args.direction)
    return Direction.parse(settings.converter.default_direction)


def read_input_text(args) -> Optional[str]:
    """读取 --text 或标准输入"""
    if args.text is not None:
        return args.text
    if args.input is None:
        return sys.stdin.read()
    return None


async def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    args = parse_args(argv)

    settings = reload_settings(args.config) if args.config else get_settings()

    # 设置日志
    setup_logging(args.log_level or settings.converter.log_level)
    logger = logging.getLogger(__name__)

    if not settings.validate():
        logger.warning("Configuration contains invalid values, see warnings above")

    try:
        processor = TongWenProcessor(settings)

        # 显示系统信息
        if args.info:
            print(json.dumps(processor.get_system_info(), indent=2, ensure_ascii=False))
            return 0

        direction = resolve_direction(args, settings)

        text = read_input_text(args)
        if text is not None:
            # 与 --text 同时给出的唯一位置参数是输出文件
            if args.text is not None and args.input and args.output:
                logger.error("--text accepts at most one path argument (the output file)")
                return 1
            output = args.output or (args.input if args.text is not None else None)

            if args.detect:
                print(processor.converter.detect_script_type(text))
                return 0

            converted = await processor.converter.convert(text, direction)
            if output:
                return 0 if processor.write_file(Path(output), converted) else 1

            sys.stdout.write(converted)
            if args.text is not None:
                sys.stdout.write('\n')
            return 0

        input_path = Path(args.input)

        if args.detect:
            if not input_path.is_file():
                logger.error(f"Input file not found: {input_path}")
                return 1
            content = processor.read_file(input_path)
            if content is None:
                return 1
            print(processor.converter.detect_script_type(content))
            return 0

        if input_path.is_file():
            # 单文件转换
            if not args.output:
                content = processor.read_file(input_path)
                if content is None:
                    return 1
                sys.stdout.write(await processor.converter.convert(content, direction))
                return 0

            output_path = Path(args.output)
            if output_path.is_dir():
                output_path = output_path / input_path.name
            return 0 if await processor.convert_file(input_path, output_path, direction) else 1

        elif input_path.is_dir():
            # 批量转换
            if not args.output:
                logger.error("An output directory is required when converting a directory")
                return 1
            failed = await processor.convert_directory(input_path, Path(args.output), direction)
            return 0 if failed == 0 else 1

        else:
            logger.error(f"Input path not found: {input_path}")
            return 1

    except TongWenError as e:
        logger.error(f"Conversion failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Conversion interrupted by user")
        return 130


def run() -> None:
    """命令行入口"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nProgram interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    run()
