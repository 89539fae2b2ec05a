#!/usr/bin/env python3
"""
Base 使用示例

演示类级配置继承、依赖注入、混入和实例事件。
"""

import sys
import logging
from pathlib import Path

# 添加项目根目录到路径
sys.path.append(str(Path(__file__).parent.parent))

from basekit import Base, Mixin, deep_merge


class Widget(Base):
    options = {
        "visible": True,
        "style": {"color": "black", "padding": 4},
    }

    def show(self):
        self.options["visible"] = True
        self.trigger("show", self)


class Button(Widget):
    options = {
        "label": "OK",
        "style": {"color": "white"},
    }

    def __init__(self, parent, options=None):
        super().__init__(options)
        self.parent = parent

    def click(self):
        self.trigger("click", self.options["label"])


# 类级混入: 工厂方法
Button.extend({
    "create_ok": lambda cls, parent: cls(parent, {"label": "OK"}),
})

# 实例级混入: 通用的禁用逻辑
Button.include(Mixin(
    {"disable": lambda self: self.unbind("click")},
    on_included=lambda cls: cls.declare_options(
        deep_merge(cls.class_options(), {"disabled_style": {"color": "grey"}})),
))


def main():
    """主函数"""
    print("=== Base 示例 ===")

    button = Button.create_ok(parent=None)
    print(f"按钮配置: {button.options}")

    # 注入自己的日志器
    logger = logging.getLogger("example")
    labelled = Button(None, {"label": "Cancel", "dependencies": {"logger": logger}})
    print(f"注入的日志器: {labelled.logger is logger}")

    # 事件
    labelled.bind("click", lambda label: print(f"点击了: {label}"))
    labelled.one("show", lambda widget: print(f"首次显示: {widget.options['label']}"))

    labelled.click()
    labelled.show()
    labelled.show()

    labelled.disable()
    labelled.click()
    print("禁用后点击不会再有输出")


if __name__ == "__main__":
    main()
