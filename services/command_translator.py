"""
Command translation system for converting natural language to GeoGebra commands.

Selects the rule-based fallback when no model key is configured, otherwise
asks the chat model for an explanation plus a fenced ``geogebra`` block and
extracts, sanitizes and packages the result.
"""

import logging
from typing import Dict, Any, List, Optional

from config.settings import SystemSettings
from core.base_component import BaseComponent
from core.data_models import ConversationTurn, TranslationMode, TranslationResult
from core.interfaces import ICommandTranslator
from safety_validator.command_sanitizer import CommandSanitizer
from services.fallback_generator import FallbackGenerator, rule_based_fallback
from services.history_normalizer import normalize_history
from services.llm_client import ChatCompletionsClient, ChatMessage, LLMResponse
from services.response_extractor import extract_geogebra_block


logger = logging.getLogger(__name__)


class InputValidationError(ValueError):
    """Raised when the user text is missing or blank."""
    pass


class PromptTemplates:
    """Prompts sent to the chat model."""

    SYSTEM_PROMPT = """你是一个几何学助手，可以通过GeoGebra绘制几何图形和动画。

当用户请求绘制图形或动画时，请提供：
1. 友好的解释，包括数学概念和原理
2. 清晰的GeoGebra命令

规范：
1. 将GeoGebra命令放在```geogebra和```标记之间，每行一个命令。
2. 不要在GeoGebra代码块中添加注释。
3. 命令应该按照逻辑顺序排列，从基本元素到复杂构造。
4. 数学公式应该包裹在$$中。
5. 除非用户明确要求，不要使用脚本类命令（SetClickScript、SetUpdateScript、RunClickScript、RunUpdateScript、Execute、Button）。

多轮对话：
1. 如果之前的对话中已经创建了对象，继续沿用已有的对象名称。
2. 只输出本轮需要新增或修改的命令，不要重复已经执行过的命令。
3. 如果用户的请求不明确，请提出澄清问题，此时不要输出命令块。

GeoGebra支持的命令类型包括：

## 基本元素
- 点：A = (2, 3)
- 向量：v = Vector[A, B] 或 v = (1, 2)
- 线段：Segment(A, B)
- 直线：Line(A, B)
- 射线：Ray(A, B)
- 圆：Circle(A, 3) 或 Circle(A, B)
- 椭圆：Ellipse(F1, F2, a)
- 多边形：Polygon(A, B, C, …)
- 正多边形：RegularPolygon(A, B, n)

## 函数和曲线
- 斜率：Slope(line)

## 动画和交互
- 滑块：a = Slider[0, 10, 0.1]
- 启动/停止动画：StartAnimation[a, true] 或 StartAnimation[a, false]
- 设置动画速度：SetAnimationSpeed(object, speed)
- 条件显示对象：SetConditionToShowObject(object, condition)
- 设置轨迹：SetTrace(object, true) 或 SetTrace(object, false)
- 轨迹曲线：Locus(point, parameter)

## 高级功能
- 序列：Sequence(expression, variable, from, to, step)
- 列表：{a, b, c}
- 条件表达式：If(condition, then, else)
- 文本对象：Text("文本", (x, y))

请确保命令语法正确，并在解释中提及每个命令的目的。"""

    CLARIFICATION_PROMPT = (
        'AI 返回中没有解析到 GeoGebra 命令块（需要用 ```geogebra ... ``` 包裹）。'
        '你可以更具体地描述：对象名称、位置、参数范围、是否需要动画等。'
    )


class GeometryCommandTranslator(BaseComponent, ICommandTranslator):
    """
    Translates natural language requests into GeoGebra command batches.

    Stateless between calls: history is passed in with each request. The
    fallback/model branch is decided from the settings object given at
    construction.
    """

    def __init__(
        self,
        settings: Optional[SystemSettings] = None,
        llm_client: Optional[ChatCompletionsClient] = None,
        sanitizer: Optional[CommandSanitizer] = None,
        fallback: Optional[FallbackGenerator] = None
    ):
        """
        Initialize command translator.

        Args:
            settings: System settings; defaults mean fallback mode
            llm_client: Pre-built model client. Without one, a client is
                created per request (or once by initialize())
            sanitizer: Command sanitizer applied at the response boundary
            fallback: Rule-based generator used without a model key; the
                default decision list when omitted
        """
        super().__init__("command_translator")
        self.settings = settings or SystemSettings()
        self.llm_client = llm_client
        self.sanitizer = sanitizer or CommandSanitizer()
        self.fallback = fallback
        self._owns_client = False

        logger.info(f"Command translator initialized in {self.mode.value} mode")

    @property
    def mode(self) -> TranslationMode:
        """Which path translate() takes with the current settings."""
        return TranslationMode.MODEL if self.settings.llm.is_configured else TranslationMode.FALLBACK

    async def initialize(self) -> bool:
        """Create a long-lived model client when a key is configured."""
        if self.mode == TranslationMode.MODEL and self.llm_client is None:
            self.llm_client = ChatCompletionsClient(self.settings.llm)
            self._owns_client = True
        return True

    async def start(self) -> bool:
        return True

    async def stop(self) -> bool:
        """Close the model client if this translator created it."""
        if self._owns_client and self.llm_client is not None:
            await self.llm_client.close()
            self.llm_client = None
            self._owns_client = False
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {
            'component': self.component_name,
            'status': 'healthy',
            'mode': self.mode.value,
            'model': self.settings.llm.model if self.mode == TranslationMode.MODEL else None
        }

    async def translate(self, user_text: str, history: Optional[Any] = None) -> TranslationResult:
        """
        Translate a request into an explanation plus commands.

        Args:
            user_text: Natural language request
            history: Prior turns as sent by the client; normalized here

        Returns:
            TranslationResult: Sanitized commands, with need_clarification
            set when there are none

        Raises:
            InputValidationError: If the text is missing or blank
            LLMServiceError: If the model call fails
        """
        if not isinstance(user_text, str) or not user_text.strip():
            raise InputValidationError("text 不能为空")
        text = user_text.strip()

        if self.mode == TranslationMode.FALLBACK:
            if self.fallback is not None:
                extraction = self.fallback.generate(text)
            else:
                extraction = rule_based_fallback(text)
            return self._build_result(
                TranslationMode.FALLBACK, extraction.explanation, extraction.commands, raw=None
            )

        turns = normalize_history(
            history,
            max_messages=self.settings.history.max_messages,
            max_chars=self.settings.history.max_message_chars
        )
        messages = self._build_messages(text, turns)

        llm_response = await self._call_model(messages)
        extraction = extract_geogebra_block(llm_response.content)

        return self._build_result(
            TranslationMode.MODEL, extraction.explanation, extraction.commands, raw=llm_response.content
        )

    def _build_messages(self, text: str, turns: List[ConversationTurn]) -> List[ChatMessage]:
        messages = [ChatMessage(role="system", content=PromptTemplates.SYSTEM_PROMPT)]
        messages.extend(ChatMessage(role=turn.role, content=turn.content) for turn in turns)
        messages.append(ChatMessage(role="user", content=text))
        return messages

    async def _call_model(self, messages: List[ChatMessage]) -> LLMResponse:
        temperature = self.settings.llm.temperature
        if self.llm_client is not None:
            return await self.llm_client.generate_response(messages, temperature=temperature)

        async with ChatCompletionsClient(self.settings.llm) as client:
            return await client.generate_response(messages, temperature=temperature)

    def _build_result(
        self,
        mode: TranslationMode,
        explanation: str,
        commands: List[str],
        raw: Optional[str]
    ) -> TranslationResult:
        # Sanitized again here: fallback commands never passed through extraction.
        commands = self.sanitizer.sanitize(commands)
        explanation = (explanation or '').strip()

        if not commands and not explanation:
            explanation = PromptTemplates.CLARIFICATION_PROMPT

        logger.info(f"Translation ({mode.value}) produced {len(commands)} commands")

        return TranslationResult(
            mode=mode,
            explanation=explanation,
            commands=commands,
            need_clarification=not commands,
            raw_model_output=raw
        )
