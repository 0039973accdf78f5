"""agentwire: typed interaction envelopes shared by engines, agents and tools."""

from agentwire.core.domain_types import ANONYMOUS, Principal, ThreadId
from agentwire.infrastructure.observability import setup_logging_from_settings
from agentwire.schemas.envelopes import AgentInput, AgentOutput, ToolInput, ToolOutput
from agentwire.schemas.function import Function, FunctionDefinition
from agentwire.schemas.meta import RequestMeta
from agentwire.schemas.resource import Resource
from agentwire.schemas.tool_call import ToolCall
from agentwire.schemas.usage import Usage

__all__ = [
    "ANONYMOUS",
    "AgentInput",
    "AgentOutput",
    "Function",
    "FunctionDefinition",
    "Principal",
    "RequestMeta",
    "Resource",
    "ThreadId",
    "ToolCall",
    "ToolInput",
    "ToolOutput",
    "Usage",
    "setup_logging_from_settings",
]
