"""
Chat orchestration.

A single user message is answered by a bounded tool-calling loop: every step
streams one model turn, runs the tools it asked for and feeds their results
back, until the model answers with plain text or MAX_STEPS is reached.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, AsyncIterator, Dict, List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import (
    AIMessageChunk,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
    message_chunk_to_message,
)
from langchain_core.tools import BaseTool
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

logger = logging.getLogger(__name__)

LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))

MAX_STEPS = 5

SYSTEM_PROMPT = """\
Eres un asistente corporativo.
Tu comunicación es clara, estructurada y formal.
Utilizas lenguaje técnico cuando es apropiado.
Evitas coloquialismos.
Redactas en párrafos bien organizados.
Reglas obligatorias:
- Si necesitas información de usuarios, clientes, productos, ventas o reclamos, usa las herramientas disponibles.
- Responde únicamente con la información devuelta por las herramientas.
- Nunca inventes información.
- Si no existe información, responde que no se encontró.
"""


def build_chat_model() -> BaseChatModel:
    return ChatOpenAI(model=LLM_MODEL, temperature=LLM_TEMPERATURE, streaming=True)


def chunk_text(chunk: BaseMessage) -> str:
    content = chunk.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class ChatAgent:
    """
    Tool-calling loop over one user message.

    `model` is anything exposing `bind_tools(tools, tool_choice=...)` whose
    result streams message chunks through `astream(messages)`.
    """

    def __init__(self, model: Any, tools: List[BaseTool], max_steps: int = MAX_STEPS, system_prompt: str = SYSTEM_PROMPT):
        self.tools: Dict[str, BaseTool] = {t.name: t for t in tools}
        self.runnable = model.bind_tools(tools, tool_choice="auto")
        self.max_steps = max_steps
        self.system_prompt = system_prompt

    async def stream(self, message: str) -> AsyncIterator[str]:
        messages: List[BaseMessage] = [
            SystemMessage(content=self.system_prompt),
            HumanMessage(content=message),
        ]
        text_length = 0
        finish_reason = "length"
        step = 0

        while step < self.max_steps:
            step += 1
            response: Optional[AIMessageChunk] = None
            step_text = []
            async for chunk in self.runnable.astream(messages):
                text = chunk_text(chunk)
                if text:
                    step_text.append(text)
                    text_length += len(text)
                    yield text
                response = chunk if response is None else response + chunk

            if response is None:
                response = AIMessageChunk(content="")
            messages.append(message_chunk_to_message(response))

            tool_calls = response.tool_calls
            finish_reason = "tool-calls" if tool_calls else "stop"
            self.on_step_finish(step, finish_reason, "".join(step_text))
            if not tool_calls:
                break
            for call in tool_calls:
                messages.append(await self.run_tool(call))

        self.on_finish(step, finish_reason, text_length)

    async def run_tool(self, call: Dict[str, Any]) -> ToolMessage:
        name = call["name"]
        tool_call_id = call.get("id") or ""
        selected = self.tools.get(name)
        if selected is None:
            logger.warning("[chat.tool] unknown tool %s", name)
            return ToolMessage(content=f"Error: unknown tool '{name}'.", tool_call_id=tool_call_id, name=name, status="error")
        try:
            result = await selected.ainvoke(call.get("args") or {})
        except ValidationError as e:
            logger.warning("[chat.tool] invalid input for %s: %s", name, e)
            return ToolMessage(content=f"Error: invalid input for '{name}': {e}", tool_call_id=tool_call_id, name=name, status="error")
        return ToolMessage(
            content=json.dumps(result, ensure_ascii=False, default=str),
            tool_call_id=tool_call_id,
            name=name,
        )

    def on_step_finish(self, step: int, finish_reason: str, text: str) -> None:
        logger.info("[chat.step] step=%s finish_reason=%s has_text=%s", step, finish_reason, bool(text.strip()))

    def on_finish(self, steps: int, finish_reason: str, text_length: int) -> None:
        logger.info("[chat.finish] steps=%s finish_reason=%s text_length=%s", steps, finish_reason, text_length)
