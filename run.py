import argparse
import importlib
import sys
from typing import List, Optional

try:
    import rapidjson as json
except ImportError:
    import json

from basekit.base.Base import Base
from basekit.base.Options import fill_config


def load_class(target: str) -> type:
    """按 module:Class 格式加载类"""
    if ":" not in target:
        raise ValueError(f"类路径格式应为 module:Class，收到: {target}")

    module_name, class_name = target.split(":", 1)
    module = importlib.import_module(module_name)
    klass = module
    for part in class_name.split("."):
        klass = getattr(klass, part)

    if not (isinstance(klass, type) and issubclass(klass, Base)):
        raise TypeError(f"{target} 不是 Base 的子类")
    return klass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='basekit')
    subparsers = parser.add_subparsers(dest='command', help='可用命令', required=True)

    # options 命令
    options_parser = subparsers.add_parser('options', help='查看类的已解析配置')
    options_parser.add_argument('--class', dest='class_path', type=str, required=True,
                                help='类路径，格式为 module:Class（必需）')
    options_parser.add_argument('--config', type=str,
                                help='配置文件路径（可选，提供时合并配置文件中的小节）')
    options_parser.add_argument('--section', type=str,
                                help='配置小节名（可选，默认为类名）')

    # init-config 命令
    init_parser = subparsers.add_parser('init-config', help='把类的默认配置写入配置文件')
    init_parser.add_argument('--class', dest='class_path', type=str, required=True,
                             help='类路径，格式为 module:Class（必需）')
    init_parser.add_argument('--config', type=str, default=Base.CONFIG_PATH,
                             help=f'配置文件路径（默认为{Base.CONFIG_PATH}）')
    init_parser.add_argument('--section', type=str,
                             help='配置小节名（可选，默认为类名）')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    ARGS = build_parser().parse_args(argv)

    try:
        klass = load_class(ARGS.class_path)
    except (ImportError, AttributeError, ValueError, TypeError) as e:
        print(f"❌ 加载类失败: {e}")
        return 1

    section = ARGS.section or klass.__name__

    if ARGS.command == "options":
        resolved = klass.class_options()
        if ARGS.config:
            resolved = fill_config(klass.config_section(section, ARGS.config), resolved)

        print(json.dumps(resolved, indent=4, ensure_ascii=False, default=repr))

    elif ARGS.command == "init-config":
        defaults = klass.class_options()
        # 依赖项是运行时对象，不写入配置文件
        defaults.pop(Base.DEPENDENCIES_KEY, None)

        filled = fill_config(klass.config_section(section, ARGS.config), defaults)
        klass.save_config({section: filled}, ARGS.config)

        print(f"✅ 已写入配置小节 '{section}': {ARGS.config}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
