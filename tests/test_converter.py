import unittest
from unittest.mock import patch
from pathlib import Path
import sys
sys.path.append(str(Path(__file__).parent.parent))

import asyncio
import json
import shutil
import tempfile

from config.settings import Settings
from tongwen.converter import TongWenConverter, convert_text, convert_tongwen, get_converter
from tongwen.dictionaries.sources import DIRECTION_CATEGORIES, DictionarySource
from tongwen.exceptions import InitializationError, InvalidDirectionError
from tongwen.models import ConversionStats, Direction


class TestDirection(unittest.TestCase):
    """测试 Direction 解析"""

    def test_parse_short_codes(self):
        self.assertIs(Direction.parse('s2t'), Direction.S2T)
        self.assertIs(Direction.parse('t2s'), Direction.T2S)
        self.assertIs(Direction.parse(' S2T '), Direction.S2T)

    def test_parse_long_names(self):
        self.assertIs(Direction.parse('simplified-to-traditional'), Direction.S2T)
        self.assertIs(Direction.parse('traditional-to-simplified'), Direction.T2S)

    def test_parse_member(self):
        self.assertIs(Direction.parse(Direction.T2S), Direction.T2S)

    def test_parse_invalid(self):
        """非法方向直接失败，不做默认回退"""
        for value in ('', 'zh-tw', 's2s', None, 1):
            with self.assertRaises(InvalidDirectionError):
                Direction.parse(value)

    def test_invalid_direction_is_value_error(self):
        with self.assertRaises(ValueError):
            Direction.parse('hant')


class TestTongWenConverter(unittest.TestCase):
    """测试内置词典下的 TongWenConverter"""

    @classmethod
    def setUpClass(cls):
        cls.converter = TongWenConverter(source=DictionarySource())

    def convert(self, text, direction='s2t'):
        return asyncio.run(self.converter.convert(text, direction))

    def test_character_default_mapping(self):
        """'发' 默认转换为 '發'"""
        self.assertEqual(self.convert('发'), '發')

    def test_phrase_override_lifa(self):
        """'理发' 由词组覆盖为 '理髮'"""
        self.assertEqual(self.convert('理发'), '理髮')

    def test_default_mapping_faxian(self):
        self.assertEqual(self.convert('发现'), '發現')

    def test_phrase_override_toufa(self):
        self.assertEqual(self.convert('头发'), '頭髮')

    def test_mixed_phrases_and_characters(self):
        self.assertEqual(self.convert('我发现他的头发理发了'), '我發現他的頭髮理髮了')

    def test_idiom(self):
        self.assertEqual(self.convert('千钧一发'), '千鈞一髮')

    def test_kaifa(self):
        self.assertEqual(self.convert('开发'), '開發')

    def test_wenjuan(self):
        self.assertEqual(self.convert('问卷'), '問卷')

    def test_ambiguous_characters_in_common_words(self):
        """后 几 准 于 只在词组中转换"""
        self.assertEqual(self.convert('后天几点准时到'), '後天幾點準時到')
        self.assertEqual(self.convert('午后终于落后了'), '午後終於落後了')
        self.assertEqual(self.convert('皇后'), '皇后')
        # 单独出现时保持原样
        self.assertEqual(self.convert('后'), '后')

    def test_longest_match_in_bundled_data(self):
        """'数据库' 优先于 '数据'"""
        self.assertEqual(self.convert('数据库'), '資料庫')
        self.assertEqual(self.convert('数据'), '資料')

    def test_merge_precedence_in_bundled_data(self):
        """science 词表覆盖 general 词表中的同名键"""
        self.assertEqual(self.convert('数码相机'), '數位相機')

    def test_punctuation(self):
        self.assertEqual(self.convert('“头发”'), '「頭髮」')
        self.assertEqual(self.convert('「頭髮」', 't2s'), '“头发”')

    def test_traditional_to_simplified(self):
        self.assertEqual(self.convert('頭髮', 't2s'), '头发')
        self.assertEqual(self.convert('著名的理髮師在臺北', 't2s'), '著名的理发师在台北')
        self.assertEqual(self.convert('乾隆的頭髮很乾燥', 't2s'), '乾隆的头发很干燥')

    def test_t2s_has_no_unit_overrides(self):
        """t2s 没有 unit 词表，'公分' 按字符表处理"""
        self.assertEqual(self.convert('公分', 't2s'), '公分')
        self.assertEqual(self.convert('厘米', 's2t'), '公分')

    def test_empty_input(self):
        self.assertEqual(self.convert('', 's2t'), '')
        self.assertEqual(self.convert('', 't2s'), '')

    def test_unknown_characters_pass_through(self):
        text = 'Hello, 世界 123 🙂 𠮷'
        self.assertEqual(self.convert('abc 123 🙂 𠮷'), 'abc 123 🙂 𠮷')
        self.assertEqual(self.convert(text, 't2s'), text)

    def test_passthrough_is_stable(self):
        """不含任何映射的文本反复转换结果不变"""
        for direction in Direction:
            text = 'The quick brown fox 你好 0123'
            once = self.convert(text, direction)
            twice = self.convert(once, direction)
            self.assertEqual(once, text)
            self.assertEqual(twice, once)

    def test_metacharacters_in_text(self):
        self.assertEqual(self.convert('.*发?(头发)|[理发]$'), '.*發?(頭髮)|[理髮]$')

    def test_invalid_direction(self):
        with self.assertRaises(InvalidDirectionError):
            self.convert('发', 'zh-hant')

    def test_convert_sync_matches_async(self):
        text = '我发现他的头发理发了'
        self.assertEqual(self.converter.convert_sync(text, 's2t'), self.convert(text, 's2t'))
        self.assertEqual(self.converter.to_traditional('头发'), '頭髮')
        self.assertEqual(self.converter.to_simplified('頭髮'), '头发')

    def test_detect_script_type(self):
        self.assertEqual(self.converter.detect_script_type('我发现他的头发'), 'simplified')
        self.assertEqual(self.converter.detect_script_type('我發現他的頭髮'), 'traditional')
        self.assertEqual(self.converter.detect_script_type('发髮'), 'mixed')
        self.assertEqual(self.converter.detect_script_type('hello'), 'unknown')
        self.assertEqual(self.converter.detect_script_type(''), 'unknown')

    def test_get_conversion_stats(self):
        stats = self.converter.get_conversion_stats('头发', '頭髮')
        self.assertIsInstance(stats, ConversionStats)
        self.assertEqual(stats.changed, 2)
        self.assertEqual(stats.total_chars, 2)
        self.assertEqual(stats.change_rate, 1.0)

        unchanged = self.converter.get_conversion_stats('你好', '你好')
        self.assertEqual(unchanged.changed, 0)
        self.assertEqual(unchanged.change_rate, 0.0)

    def test_get_conversion_stats_length_change(self):
        """词组替换可能改变长度"""
        stats = self.converter.get_conversion_stats('厘米', '公分米')
        self.assertEqual(stats.changed, 3)

    def test_get_dictionary_info(self):
        info = self.converter.get_dictionary_info()
        self.assertIn('s2t', info['directions'])
        self.assertIn('t2s', info['directions'])
        self.assertIn('unit', info['directions']['s2t']['categories'])
        self.assertNotIn('unit', info['directions']['t2s']['categories'])
        self.assertGreater(info['directions']['s2t']['characters'], 0)


class TestConverterInitialization(unittest.TestCase):
    """测试转换器的一次性初始化"""

    def setUp(self):
        """测试前准备"""
        self.temp_dir = Path(tempfile.mkdtemp())
        (self.temp_dir / 'char').mkdir()
        (self.temp_dir / 'word').mkdir()
        for direction in Direction:
            (self.temp_dir / 'char' / f'{direction.value}.json').write_text(
                json.dumps({'发': '發'} if direction is Direction.S2T else {'髮': '发'}, ensure_ascii=False),
                encoding='utf-8'
            )
            for category in DIRECTION_CATEGORIES[direction]:
                (self.temp_dir / 'word' / f'{category}.{direction.value}.json').write_text('{}', encoding='utf-8')

    def tearDown(self):
        """测试后清理"""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_concurrent_callers_share_one_load(self):
        """并发任务等待同一次加载"""
        source = DictionarySource(self.temp_dir)
        converter = TongWenConverter(source=source)
        original = source.phrase_tables

        with patch.object(source, 'phrase_tables', side_effect=original) as mock_tables:
            async def run_all():
                return await asyncio.gather(*(converter.convert('发', 's2t') for _ in range(10)))

            results = asyncio.run(run_all())

        self.assertEqual(results, ['發'] * 10)
        self.assertEqual(mock_tables.call_count, len(Direction))

    def test_initialization_error_propagates(self):
        """初始化失败时抛出错误，而不是原样返回输入"""
        (self.temp_dir / 'char' / 's2t.json').unlink()
        converter = TongWenConverter(source=DictionarySource(self.temp_dir))

        async def run_all():
            return await asyncio.gather(
                *(converter.convert('发', 's2t') for _ in range(3)),
                return_exceptions=True
            )

        results = asyncio.run(run_all())
        self.assertTrue(all(isinstance(result, InitializationError) for result in results))

        with self.assertRaises(InitializationError):
            converter.convert_sync('发', 's2t')

    def test_invalid_direction_checked_before_load(self):
        converter = TongWenConverter(source=DictionarySource(self.temp_dir))
        with self.assertRaises(InvalidDirectionError):
            asyncio.run(converter.convert('发', 'xx'))
        self.assertFalse(converter.aggregator.is_loaded)

    def test_source_from_settings(self):
        """未指定 source 时根据配置创建"""
        settings = Settings()
        settings.converter.dictionary_dir = str(self.temp_dir)
        settings.converter.strict_entries = True

        converter = TongWenConverter(settings=settings)
        self.assertEqual(converter.aggregator.source.root, self.temp_dir)
        self.assertTrue(converter.aggregator.source.strict)
        self.assertEqual(converter.convert_sync('发', 's2t'), '發')


class TestModuleLevelApi(unittest.TestCase):
    """测试模块级便捷函数"""

    def test_get_converter_is_shared(self):
        self.assertIs(get_converter(), get_converter())

    def test_convert_tongwen(self):
        self.assertEqual(asyncio.run(convert_tongwen('理发', 's2t')), '理髮')

    def test_convert_text(self):
        self.assertEqual(convert_text('頭髮', 't2s'), '头发')


if __name__ == '__main__':
    unittest.main()
