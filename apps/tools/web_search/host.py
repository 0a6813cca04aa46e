"""
Host interface for the web_search tool.

The host application owns approval prompts, progress messages, error
display and its mistake counter. The tool only talks to it through ToolHost.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def missing_param_message(tool_name: str, param_name: str) -> str:
    """Guidance text returned when a required parameter is missing."""
    return (
        f"Missing value for required parameter '{param_name}' of the {tool_name} tool. "
        f"Please retry with a complete response that includes '{param_name}'."
    )


def remove_closing_tag(tag: str, text: Optional[str], partial: bool) -> str:
    """
    Strip a partially streamed closing tag from the end of text.

    While a tool block is still streaming, a parameter value can end with a
    fragment such as "</que". Complete blocks are returned unchanged.
    """
    if not partial:
        return text or ""
    if not text:
        return ""
    fragment = "".join(f"(?:{re.escape(c)})?" for c in tag)
    return re.sub(rf"\s?</?{fragment}$", "", text)


@dataclass
class ToolUse:
    """A tool invocation block as parsed by the host."""
    name: str
    params: Dict[str, Any] = field(default_factory=dict)
    partial: bool = False


class ToolHost(ABC):
    """Callbacks the tool needs from the host application."""

    @abstractmethod
    async def ask_approval(self, kind: str, message: str) -> bool:
        """Show message and return the user's decision."""

    @abstractmethod
    async def ask_partial(self, kind: str, message: str) -> None:
        """Show an in-progress message for a block that is still streaming."""

    @abstractmethod
    async def push_tool_result(self, text: str) -> None:
        """Deliver the tool's output."""

    @abstractmethod
    async def handle_error(self, stage: str, error: Exception) -> None:
        """Report a failure, labelled with the stage it happened in."""

    async def say_missing_param_error(self, tool_name: str, param_name: str) -> str:
        """Report a missing parameter and return the guidance text."""
        return missing_param_message(tool_name, param_name)

    def reset_mistake_count(self) -> None:
        """Called after a successful tool run."""


class ConsoleHost(ToolHost):
    """Command-line host: auto-approves or asks on stdin, and prints results."""

    def __init__(self, auto_approve: bool = True):
        self.auto_approve = auto_approve
        self.consecutive_mistake_count = 0

    async def ask_approval(self, kind: str, message: str) -> bool:
        if self.auto_approve:
            logger.info(f"[Approval] AUTO-APPROVED: {message}")
            return True
        answer = await asyncio.to_thread(input, f"{message}\nProceed? [y/N] ")
        return answer.strip().lower() in ("y", "yes")

    async def ask_partial(self, kind: str, message: str) -> None:
        logger.debug(f"[ConsoleHost] {kind} (partial): {message}")

    async def push_tool_result(self, text: str) -> None:
        print(text)

    async def handle_error(self, stage: str, error: Exception) -> None:
        logger.error(f"[ConsoleHost] Error {stage}: {error}")

    async def say_missing_param_error(self, tool_name: str, param_name: str) -> str:
        self.consecutive_mistake_count += 1
        return await super().say_missing_param_error(tool_name, param_name)

    def reset_mistake_count(self) -> None:
        self.consecutive_mistake_count = 0
