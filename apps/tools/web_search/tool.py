"""
web_search tool entry point.

Handles the host-facing contract around the pipeline:
1. Missing query -> guidance message, nothing launched
2. Partial (still streaming) block -> progress message only
3. Approval prompt -> declined means no work and no output
4. Run the pipeline and push the report, or report the error
"""

import json
import logging
import time
import uuid
from enum import Enum
from typing import Optional

from apps.tools.web_search.host import ToolHost, ToolUse, remove_closing_tag
from apps.tools.web_search.pipeline import SearchPipeline
from libs.core.logging_config import log_request_end, log_request_start

logger = logging.getLogger(__name__)

TOOL_NAME = "web_search"
ERROR_STAGE = "web searching"


class ToolOutcome(str, Enum):
    """How a web_search invocation ended."""

    COMPLETED = "completed"
    MISSING_PARAMETER = "missing_parameter"
    PARTIAL = "partial"
    DECLINED = "declined"
    FAILED = "failed"


async def web_search_tool(
    block: ToolUse,
    host: ToolHost,
    pipeline: Optional[SearchPipeline] = None,
) -> ToolOutcome:
    """
    Execute a web_search tool block.

    Args:
        block: The tool invocation (params["query"] is required)
        host: Host callbacks for approval, progress, results and errors
        pipeline: Pipeline to run (default: one built from settings)

    Returns:
        ToolOutcome describing how the invocation ended
    """
    try:
        query = block.params.get("query")
        if not query or not str(query).strip():
            message = await host.say_missing_param_error(TOOL_NAME, "query")
            await host.push_tool_result(message)
            return ToolOutcome.MISSING_PARAMETER

        query = remove_closing_tag("query", query, block.partial)

        if block.partial:
            logger.debug(f"[WebSearchTool] Query still streaming: {query}")
            partial_message = json.dumps({"tool": TOOL_NAME})
            try:
                await host.ask_partial("tool", partial_message)
            except Exception as e:
                logger.debug(f"[WebSearchTool] Partial update not delivered: {e}")
            return ToolOutcome.PARTIAL

        approval_message = json.dumps({
            "tool": TOOL_NAME,
            "content": f"Searching for: {query}",
        })
        if not await host.ask_approval("tool", approval_message):
            logger.info(f"[WebSearchTool] Search declined: {query}")
            return ToolOutcome.DECLINED

        trace_id = uuid.uuid4().hex[:8]
        log_request_start(logger, trace_id, query, mode=TOOL_NAME)
        started = time.monotonic()
        success = False
        try:
            pipeline = pipeline or SearchPipeline()
            report = await pipeline.search(query)
            success = True
        finally:
            log_request_end(logger, trace_id, success, (time.monotonic() - started) * 1000)

        host.reset_mistake_count()
        await host.push_tool_result(report)
        return ToolOutcome.COMPLETED

    except Exception as e:
        logger.error(f"[WebSearchTool] {ERROR_STAGE} failed: {e}")
        await host.handle_error(ERROR_STAGE, e)
        return ToolOutcome.FAILED
