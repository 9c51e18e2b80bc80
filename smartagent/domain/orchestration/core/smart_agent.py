from typing import TypedDict, Annotated, List, Dict, Any, Optional, Union
import operator
import time

from langgraph.graph import StateGraph, END
from langgraph.graph.message import add_messages
from langchain_core.messages import BaseMessage, HumanMessage, AIMessage
import structlog

from smartagent.config import SmartAgentSettings
from smartagent.domain.context.context_manager import ContextAssembler
from smartagent.domain.context.memory.memory_manager import MemoryStore
from smartagent.domain.context.state.conversation_tracker import ConversationTracker
from smartagent.domain.models.context import ContextLayerName, ContextWindow
from smartagent.domain.models.conversation import ConversationAnalysis, MessageRole
from smartagent.domain.models.history import RelevantHistory
from smartagent.domain.models.memory import MemoryItem, MemoryKind
from smartagent.domain.models.task_state import TaskKind
from smartagent.domain.prompt.prompt_composer import PromptContext
from smartagent.domain.prompt.rules_composer import RulesAwareComposer
from smartagent.domain.prompt.standards import Surface
from smartagent.domain.prompt.surface_wrappers import wrap_for_surface
from smartagent.infrastructure.integrations.history_loader import ProjectHistoryLoader
from smartagent.infrastructure.integrations.rules_loader import RulesLoader
from smartagent.infrastructure.observability.logging import MetricsCollector

from . import guidance

logger = structlog.get_logger(__name__)

RECALL_LIMIT = 5
RECALL_MIN_IMPORTANCE = 60
SUCCESS_IMPORTANCE = 80


class PromptWorkflowState(TypedDict):
    """State carried through one prompt request"""
    messages: Annotated[List[BaseMessage], add_messages]
    user_text: str
    prompt_context: PromptContext
    current_file: Optional[str]
    task_kind: Optional[TaskKind]
    analysis: Optional[ConversationAnalysis]
    window: Optional[ContextWindow]
    memories: List[MemoryItem]
    relevant_history: Optional[RelevantHistory]
    prompt: str
    chain_trace: Annotated[List[str], operator.add]


class SmartAgent:
    """Context-aware prompt engine built on LangGraph

    Each request records the user message, re-reads the conversation, builds
    a context window, recalls memories and project history, and composes the
    rules-aware prompt with conversational framing around it.
    """

    def __init__(
        self,
        memory: MemoryStore,
        tracker: ConversationTracker,
        assembler: ContextAssembler,
        composer: RulesAwareComposer,
        rules_loader: RulesLoader,
        history_loader: ProjectHistoryLoader,
        settings: Optional[SmartAgentSettings] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.memory = memory
        self.tracker = tracker
        self.assembler = assembler
        self.composer = composer
        self.rules_loader = rules_loader
        self.history_loader = history_loader
        self.settings = settings or SmartAgentSettings()
        self.metrics = metrics or MetricsCollector()
        self.initialized = False
        self.workflow = self._create_workflow()

    def _create_workflow(self):
        """Create the prompt workflow graph"""

        workflow = StateGraph(PromptWorkflowState)

        workflow.add_node("record_user_message", self.record_user_message_node)
        workflow.add_node("analyze_conversation", self.analyze_conversation_node)
        workflow.add_node("build_context", self.build_context_node)
        workflow.add_node("recall_memory", self.recall_memory_node)
        workflow.add_node("compose_prompt", self.compose_prompt_node)
        workflow.add_node("record_reply", self.record_reply_node)

        workflow.set_entry_point("record_user_message")

        workflow.add_edge("record_user_message", "analyze_conversation")
        workflow.add_edge("analyze_conversation", "build_context")
        workflow.add_edge("build_context", "recall_memory")
        workflow.add_edge("recall_memory", "compose_prompt")
        workflow.add_edge("compose_prompt", "record_reply")
        workflow.add_edge("record_reply", END)

        return workflow.compile()

    async def initialize(self):
        """Load rules, project history and memory, then open a conversation"""

        if self.initialized:
            return

        self.composer.set_rules(await self.rules_loader.load_combined())

        project = await self.history_loader.get_project_context()
        if project is not None:
            self.assembler.initialize(project)

        await self.memory.load()

        if self.tracker.get_context() is None:
            self.tracker.start_conversation()

        self.initialized = True
        logger.info("Smart agent initialized", has_rules=self.composer.rules is not None)

    async def generate_prompt(
        self,
        text: str,
        surface: Optional[Union[Surface, str]] = None,
        context: Optional[PromptContext] = None,
        current_file: Optional[str] = None,
    ) -> str:
        """Compose a context-aware prompt for ``text``, wrapped for ``surface`` when given"""

        await self.initialize()
        start_time = time.time()

        context = context or PromptContext()
        result = await self.workflow.ainvoke(
            {
                "messages": [],
                "user_text": text,
                "prompt_context": context,
                "current_file": current_file or context.target_directory,
                "task_kind": context.task,
                "analysis": None,
                "window": None,
                "memories": [],
                "relevant_history": None,
                "prompt": "",
                "chain_trace": [],
            }
        )

        self.metrics.increment_counter("prompts.generated")
        self.metrics.record_latency(
            "generate_prompt",
            (time.time() - start_time) * 1000,
            tags={"task_kind": result["task_kind"].value},
        )
        logger.info(
            "Prompt generated",
            task_kind=result["task_kind"].value,
            trace=result["chain_trace"],
            context_items=len(result["window"].items),
            memories=len(result["memories"]),
        )

        prompt = result["prompt"]
        return wrap_for_surface(prompt, surface) if surface is not None else prompt

    async def record_user_message_node(self, state: PromptWorkflowState) -> Dict[str, Any]:
        self.tracker.add_message(MessageRole.USER, state["user_text"])
        return {
            "messages": [HumanMessage(content=state["user_text"])],
            "chain_trace": ["record_user_message"],
        }

    async def analyze_conversation_node(self, state: PromptWorkflowState) -> Dict[str, Any]:
        analysis = self.tracker.analyze()
        kind = guidance.infer_task_kind(state["user_text"], state["task_kind"])

        conversation = self.tracker.get_context()
        if conversation is not None:
            self.assembler.update_layer(ContextLayerName.CONVERSATION, conversation)

        logger.debug(
            "Conversation analyzed",
            task_kind=kind.value,
            mood=analysis.suggested_mood.value if analysis else None,
            complexity=analysis.complexity if analysis else None,
        )
        return {"analysis": analysis, "task_kind": kind, "chain_trace": ["analyze_conversation"]}

    async def build_context_node(self, state: PromptWorkflowState) -> Dict[str, Any]:
        window = self.assembler.build_task_context(
            state["task_kind"],
            state["user_text"],
            state["current_file"],
        )
        return {"window": window, "chain_trace": ["build_context"]}

    async def recall_memory_node(self, state: PromptWorkflowState) -> Dict[str, Any]:
        memories = self.memory.search(
            query=state["user_text"],
            limit=RECALL_LIMIT,
            min_importance=RECALL_MIN_IMPORTANCE,
        )
        history = await self.history_loader.get_relevant_history(
            state["task_kind"],
            state["prompt_context"].component,
        )
        return {"memories": memories, "relevant_history": history, "chain_trace": ["recall_memory"]}

    async def compose_prompt_node(self, state: PromptWorkflowState) -> Dict[str, Any]:
        analysis = state["analysis"]
        history = state["relevant_history"] or RelevantHistory()
        kind = state["task_kind"]

        sections = [
            guidance.build_greeting(analysis.suggested_mood if analysis else None),
            guidance.build_introduction(state["window"], history),
            guidance.build_memory_recall(state["memories"]),
            guidance.build_established_context(self.tracker.get_context()),
            self.composer.compose_enhanced(state["user_text"], state["prompt_context"]),
            guidance.build_guidance(kind, history),
            guidance.build_encouragement(analysis.complexity if analysis else None),
        ]
        prompt = "\n\n".join(section for section in sections if section)
        return {"prompt": prompt, "chain_trace": ["compose_prompt"]}

    async def record_reply_node(self, state: PromptWorkflowState) -> Dict[str, Any]:
        self.tracker.add_message(MessageRole.ASSISTANT, state["prompt"])
        return {
            "messages": [AIMessage(content=state["prompt"])],
            "chain_trace": ["record_reply"],
        }

    async def learn_from_outcome(self, success: bool, feedback: Optional[str] = None):
        """Feed an outcome back: momentum moves and a successful request is remembered"""

        conversation = self.tracker.get_context()
        if conversation is None:
            return

        step = self.tracker.settings.momentum_step
        self.tracker.update_momentum(step if success else -step)

        if success:
            last_user = next(
                (m for m in reversed(conversation.messages) if m.role == MessageRole.USER),
                None,
            )
            if last_user is not None:
                self.memory.add_to_working_memory(
                    content=f"Successful: {last_user.content}",
                    kind=MemoryKind.PATTERN,
                    importance=SUCCESS_IMPORTANCE,
                    associations=list(conversation.established_context),
                )

        self.metrics.increment_counter("outcomes.success" if success else "outcomes.failure")
        logger.info("Outcome recorded", success=success, feedback=feedback, momentum=conversation.momentum)
        await self.memory.save()

    async def end_session(self, satisfaction: float):
        """Close the conversation and persist memory"""

        await self.tracker.end_conversation(satisfaction)
        await self.memory.save()
