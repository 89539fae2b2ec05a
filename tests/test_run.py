#!/usr/bin/env python3
"""
命令行测试

测试 run.py 的 options 与 init-config 命令
"""

import io
import os
import sys
import json
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

# 添加项目根目录到Python路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from basekit.base.Base import Base
from run import load_class, main


class Panel(Base):
    options = {
        "title": "untitled",
        "size": {"width": 100, "height": 50},
        "dependencies": {"renderer": object()},
    }


class NotABase:
    pass


PANEL_PATH = f"{__name__}:Panel"


class TestRun(unittest.TestCase):
    """命令行测试"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.temp_dir, "config.json")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def run_main(self, *argv):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = main(list(argv))
        return code, buffer.getvalue()

    def test_load_class(self):
        """按 module:Class 加载 Base 子类"""
        self.assertIs(load_class(PANEL_PATH), Panel)
        with self.assertRaises(ValueError):
            load_class("no_colon")
        with self.assertRaises(TypeError):
            load_class(f"{__name__}:NotABase")

    def test_options_command(self):
        """options 命令输出已解析配置"""
        code, output = self.run_main("options", "--class", PANEL_PATH)
        self.assertEqual(code, 0)
        printed = json.loads(output)
        self.assertEqual(printed["title"], "untitled")
        self.assertEqual(printed["size"], {"width": 100, "height": 50})

    def test_options_command_with_config(self):
        """提供配置文件时合并类名小节"""
        with open(self.config_path, "w", encoding="utf-8") as writer:
            json.dump({"Panel": {"size": {"width": 300}}}, writer)

        code, output = self.run_main("options", "--class", PANEL_PATH,
                                     "--config", self.config_path)
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output)["size"], {"width": 300, "height": 50})

    def test_init_config_command(self):
        """init-config 写入默认配置，保留已有值，不写依赖项"""
        with open(self.config_path, "w", encoding="utf-8") as writer:
            json.dump({"Panel": {"title": "main"}, "Other": {"x": 1}}, writer)

        code, output = self.run_main("init-config", "--class", PANEL_PATH,
                                     "--config", self.config_path)
        self.assertEqual(code, 0)
        self.assertIn("Panel", output)

        with open(self.config_path, "r", encoding="utf-8") as reader:
            saved = json.load(reader)
        self.assertEqual(saved["Other"], {"x": 1})
        self.assertEqual(saved["Panel"], {
            "title": "main",
            "size": {"width": 100, "height": 50},
        })

    def test_unknown_class(self):
        """无法加载的类返回错误码"""
        code, output = self.run_main("options", "--class", "missing_module_xyz:Thing")
        self.assertEqual(code, 1)
        self.assertIn("加载类失败", output)


if __name__ == "__main__":
    unittest.main()
