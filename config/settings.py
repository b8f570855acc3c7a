import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List

import yaml

logger = logging.getLogger(__name__)

VALID_DIRECTIONS = ('s2t', 't2s')
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _coerce_value(key: str, value: Any) -> Any:
    """按字段类型转换配置文件中的值，无法转换时返回 None"""
    if key == 'strict_entries':
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return _parse_bool(value)
        return None

    if key == 'file_patterns':
        if isinstance(value, str):
            return [value]
        if isinstance(value, list) and value and all(isinstance(item, str) for item in value):
            return value
        return None

    # dictionary_dir / default_direction / log_level 都是字符串
    if isinstance(value, str) and value.strip():
        return value
    return None


@dataclass
class ConverterConfig:
    """转换器配置"""
    # 词典配置
    dictionary_dir: Optional[str] = None  # None 表示使用内置词典
    strict_entries: bool = False

    # 转换配置
    default_direction: str = 's2t'
    file_patterns: List[str] = field(default_factory=lambda: ['*.txt', '*.md'])

    # 系统配置
    log_level: str = 'INFO'

    def __post_init__(self):
        """规范化配置"""
        self.default_direction = self.default_direction.strip().lower()
        self.log_level = self.log_level.strip().upper()
        if self.dictionary_dir is not None:
            self.dictionary_dir = str(Path(self.dictionary_dir).expanduser())


class Settings:
    """统一配置管理器"""

    def __init__(self, config_file: Optional[str] = None):
        """
        初始化配置

        Args:
            config_file: 可选的 YAML 配置文件路径
        """
        self.converter = ConverterConfig()

        # 从环境变量覆盖配置
        self._load_from_env()

        # 从配置文件加载（如果提供）
        if config_file and os.path.exists(config_file):
            self._load_from_file(config_file)

    def _load_from_env(self):
        """从环境变量加载配置"""
        if os.getenv('TONGWEN_DICTIONARY_DIR'):
            self.converter.dictionary_dir = os.getenv('TONGWEN_DICTIONARY_DIR')
        if os.getenv('TONGWEN_STRICT_ENTRIES'):
            self.converter.strict_entries = _parse_bool(os.getenv('TONGWEN_STRICT_ENTRIES'))
        if os.getenv('TONGWEN_DEFAULT_DIRECTION'):
            self.converter.default_direction = os.getenv('TONGWEN_DEFAULT_DIRECTION').strip().lower()
        if os.getenv('LOG_LEVEL'):
            self.converter.log_level = os.getenv('LOG_LEVEL').strip().upper()

    def _load_from_file(self, config_file: str):
        """从 YAML 配置文件加载"""
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {config_file}: {e}")
            return

        if not isinstance(config_data, dict):
            logger.warning(f"Config file {config_file} must contain a mapping, ignoring it")
            return

        # 各个段落都映射到转换器配置
        sections = ('dictionaries', 'conversion', 'system')

        # 字段名映射
        field_mapping = {
            'dictionaries': {
                'dir': 'dictionary_dir',
                'strict': 'strict_entries',
            },
            'conversion': {
                'direction': 'default_direction',
            },
        }

        for section in sections:
            section_config = config_data.get(section) or {}
            if not isinstance(section_config, dict):
                logger.warning(f"Config section '{section}' must be a mapping, ignoring it")
                continue

            for name, raw_value in section_config.items():
                key = field_mapping.get(section, {}).get(name, name)
                if not hasattr(self.converter, key):
                    logger.debug(f"Ignoring unknown config key: {section}.{name}")
                    continue

                value = _coerce_value(key, raw_value)
                if value is None:
                    logger.warning(f"Ignoring invalid value for {section}.{name}: {raw_value!r}")
                    continue
                setattr(self.converter, key, value)

        # 重新规范化从文件读取的值
        self.converter.__post_init__()

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            'converter': {
                'dictionary_dir': self.converter.dictionary_dir,
                'strict_entries': self.converter.strict_entries,
                'default_direction': self.converter.default_direction,
                'file_patterns': list(self.converter.file_patterns),
                'log_level': self.converter.log_level,
            }
        }

    def validate(self) -> bool:
        """验证配置有效性"""
        valid = True

        if self.converter.default_direction not in VALID_DIRECTIONS:
            logger.warning(f"Invalid default direction: {self.converter.default_direction}")
            valid = False

        if self.converter.log_level not in VALID_LOG_LEVELS:
            logger.warning(f"Invalid log level: {self.converter.log_level}")
            valid = False

        if self.converter.dictionary_dir and not Path(self.converter.dictionary_dir).is_dir():
            logger.warning(f"Dictionary directory not found: {self.converter.dictionary_dir}")
            valid = False

        return valid


# 全局配置实例
settings = Settings()


def get_settings() -> Settings:
    """获取全局配置实例"""
    return settings


def reload_settings(config_file: Optional[str] = None) -> Settings:
    """重新加载配置"""
    global settings
    settings = Settings(config_file)
    return settings
