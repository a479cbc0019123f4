"""
Rule-based command generation used when no model API key is configured.

A small ordered decision list of keyword templates; the first matching rule
wins. This keeps the demo path working offline and is not meant to grow into
general language understanding.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Sequence

from core.data_models import ExtractionResult


logger = logging.getLogger(__name__)


EMPTY_INPUT_EXPLANATION = '你的输入为空，请描述你想绘制的图形或动画。'

DEMO_MODE_EXPLANATION = (
    '当前服务未配置 LLM Key，已进入演示兜底模式。'
    '我暂时只能处理“圆/椭圆/圆周运动”等少量请求。'
    '请在后端配置 DEEPSEEK_API_KEY 后再试更复杂的自然语言绘图。'
)


@dataclass(frozen=True)
class FallbackRule:
    """A keyword-triggered command template."""
    name: str
    required: Sequence[Pattern[str]]
    explanation: str
    commands: Sequence[str] = field(default_factory=tuple)

    def matches(self, text: str) -> bool:
        """True when every required pattern occurs in the text."""
        return all(pattern.search(text) for pattern in self.required)


ELLIPSE = re.compile(r'椭圆')
CIRCLE = re.compile(r'圆')
MOTION = re.compile(r'运动|动画|转')


DEFAULT_RULES: List[FallbackRule] = [
    FallbackRule(
        name='ellipse',
        required=(ELLIPSE,),
        explanation=(
            '用标准椭圆方程 $$x^2/a^2 + y^2/b^2 = 1$$（这里取 a=5, b=3）来绘制椭圆。'
            '第一条命令直接定义隐式曲线；第二条命令添加文字标注。'
        ),
        commands=(
            'x^2/25 + y^2/9 = 1',
            'Text("椭圆：x^2/25 + y^2/9 = 1", (-9, 6))',
        ),
    ),
    FallbackRule(
        name='circular_motion',
        required=(CIRCLE, MOTION),
        explanation=(
            '用滑块 a 作为参数角度（从 0 到 $$2\\pi$$），点 P 按 (5 cos(a), 5 sin(a)) '
            '在半径 5 的圆周上运动，然后启动滑块动画。'
        ),
        commands=(
            'a = Slider[0, 2π, 0.01]',
            'Circle((0, 0), 5)',
            'P = (5 cos(a), 5 sin(a))',
            'StartAnimation[a, true]',
        ),
    ),
    FallbackRule(
        name='circle',
        required=(CIRCLE,),
        explanation='先创建圆心 O，再以半径 5 绘制圆。',
        commands=('O = (0, 0)', 'Circle(O, 5)'),
    ),
]


class FallbackGenerator:
    """Evaluates fallback rules top to bottom."""

    def __init__(self, rules: Optional[Sequence[FallbackRule]] = None):
        self.rules = list(rules if rules is not None else DEFAULT_RULES)

    def generate(self, user_text: Optional[str]) -> ExtractionResult:
        """
        Produce commands for the first rule matching the text.

        Args:
            user_text: User request

        Returns:
            ExtractionResult: Explanation and commands; empty or unmatched
            input yields no commands
        """
        text = str(user_text or '').strip()
        if not text:
            return ExtractionResult(commands=[], explanation=EMPTY_INPUT_EXPLANATION)

        for rule in self.rules:
            if rule.matches(text):
                logger.info(f"Fallback rule '{rule.name}' matched")
                return ExtractionResult(commands=list(rule.commands), explanation=rule.explanation)

        logger.info("No fallback rule matched")
        return ExtractionResult(commands=[], explanation=DEMO_MODE_EXPLANATION)


_default_generator = FallbackGenerator()


def rule_based_fallback(user_text: Optional[str]) -> ExtractionResult:
    """Run the default decision list on user text."""
    return _default_generator.generate(user_text)
