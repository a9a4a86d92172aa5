"""
Agents package for the search agent.

This package contains the two agent variants and the components the
fixed pipeline is built from.
"""

from .answer_synthesizer import AnswerSynthesizer
from .base_agent import AgentRun, BaseAgent
from .continuation_judge import ContinuationJudge
from .pipeline_agent import AgentContext, FixedPipelineAgent, PipelineRun, PipelineState
from .query_planner import QueryPlanner
from .tool_agent import ToolAgentRun, ToolDrivenAgent

__all__ = [
    "AgentContext",
    "AgentRun",
    "AnswerSynthesizer",
    "BaseAgent",
    "ContinuationJudge",
    "FixedPipelineAgent",
    "PipelineRun",
    "PipelineState",
    "QueryPlanner",
    "ToolAgentRun",
    "ToolDrivenAgent",
]
