from typing import List, Optional, Union
from pathlib import Path

import anyio
import structlog

from smartagent.config import SmartAgentSettings
from smartagent.domain.context.context_manager import ContextAssembler
from smartagent.domain.context.memory.memory_manager import MemoryStore
from smartagent.domain.context.state.conversation_tracker import ConversationTracker
from smartagent.domain.models.rules import CodeValidation
from smartagent.domain.models.task_state import Task, TaskContext, TaskKind, TaskResult, TaskStatus
from smartagent.domain.orchestration.core.smart_agent import SmartAgent
from smartagent.domain.prompt.prompt_composer import PromptContext
from smartagent.domain.prompt.rules_composer import RulesAwareComposer
from smartagent.domain.prompt.standards import Surface
from smartagent.domain.task.task_executor import Executor
from smartagent.domain.task.task_manager import TaskManager
from smartagent.infrastructure.integrations.cursor_integration import CursorIntegration
from smartagent.infrastructure.integrations.history_loader import ProjectHistoryLoader
from smartagent.infrastructure.integrations.rules_loader import RulesLoader
from smartagent.infrastructure.observability.logging import MetricsCollector, setup_logging
from smartagent.infrastructure.util.clock import Clock, SystemClock
from smartagent.infrastructure.util.ids import IdGenerator, UuidIdGenerator

logger = structlog.get_logger(__name__)


class SmartAgentService:
    """Composition root: one instance per host process or per session

    Each public method maps to one command-surface verb (setup, prompt,
    task create/list/execute, validate) plus the Cursor prompt helper.
    """

    def __init__(
        self,
        settings: Optional[SmartAgentSettings] = None,
        clock: Optional[Clock] = None,
        ids: Optional[IdGenerator] = None,
    ):
        self.settings = settings or SmartAgentSettings()
        self.clock = clock or SystemClock()
        self.ids = ids or UuidIdGenerator()
        self.metrics = MetricsCollector()

        root = self.settings.project_root
        self.memory = MemoryStore(self.settings.memory, self.clock, self.ids)
        self.tracker = ConversationTracker(self.memory, self.settings.conversation, self.clock, self.ids)
        self.assembler = ContextAssembler(self.settings.context, self.clock)
        self.composer = RulesAwareComposer(self.settings.standards)
        self.rules_loader = RulesLoader(root)
        self.history_loader = ProjectHistoryLoader(root, self.clock, self.ids)
        self.tasks = TaskManager(self.composer, self.settings.task, self.clock, self.ids)
        self.integration = CursorIntegration(root, self.composer, version=self.settings.standards.version)
        self.agent = SmartAgent(
            memory=self.memory,
            tracker=self.tracker,
            assembler=self.assembler,
            composer=self.composer,
            rules_loader=self.rules_loader,
            history_loader=self.history_loader,
            settings=self.settings,
            metrics=self.metrics,
        )

    async def setup(self, configure_logging: bool = True):
        if configure_logging:
            setup_logging(
                log_level=self.settings.logging.level,
                log_format=self.settings.logging.format,
                service_name=self.settings.service_name,
            )
        written = await self.integration.setup()
        await self.agent.initialize()
        logger.info(
            "Smart agent service ready",
            project_root=str(self.settings.project_root),
            files_written=written,
        )

    async def prompt(
        self,
        surface: Optional[Union[Surface, str]],
        text: str,
        context: Optional[PromptContext] = None,
    ) -> str:
        context = context or PromptContext()
        try:
            context.surface = Surface(surface) if surface is not None else None
        except ValueError:
            logger.debug("Unknown surface, prompt is passed through unwrapped", surface=surface)
        return await self.agent.generate_prompt(text, surface=surface, context=context)

    def create_task(
        self,
        kind: Union[TaskKind, str],
        title: str,
        description: str,
        component: Optional[str] = None,
        feature: Optional[str] = None,
        target_directory: Optional[str] = None,
        requirements: Optional[List[str]] = None,
    ) -> Task:
        context = TaskContext(
            component=component or None,
            feature=feature or None,
            target_directory=target_directory or None,
            requirements=list(requirements or []),
        )
        return self.tasks.create_task(TaskKind(kind), title, description, context)

    def list_tasks(self, status: Optional[TaskStatus] = None) -> List[Task]:
        return self.tasks.list_tasks(status)

    async def execute_task(
        self,
        task_id: str,
        executor: Executor,
        surface: Optional[Union[Surface, str]] = None,
    ) -> TaskResult:
        result = await self.tasks.execute_task(task_id, executor, surface)
        if self.tasks.get_task(task_id).status == TaskStatus.FAILED:
            self.metrics.increment_counter("tasks.failed")
        elif result.success:
            self.metrics.increment_counter("tasks.completed")
        else:
            self.metrics.increment_counter("tasks.below_threshold")
        return result

    def validate(self, code: str) -> CodeValidation:
        return self.composer.validate_code(code)

    async def cursor_prompt(self, text: str, file_path: Optional[str] = None) -> str:
        """Cursor prompt with component, feature and directory taken from ``file_path``"""

        await self.agent.initialize()
        return self.integration.create_cursor_prompt(text, file_path)

    async def validate_file(self, path: Path) -> CodeValidation:
        """Validate a source file, adding hints that depend on where it lives"""

        try:
            code = await anyio.Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read file for validation", path=str(path), error=str(e))
            return CodeValidation(valid=False, errors=[f"Could not read {path}: {e}"])
        return self.integration.validate_file(Path(path).as_posix(), code)

    async def learn_from_outcome(self, success: bool, feedback: Optional[str] = None):
        await self.agent.learn_from_outcome(success, feedback)

    async def end_session(self, satisfaction: float):
        await self.agent.end_session(satisfaction)
