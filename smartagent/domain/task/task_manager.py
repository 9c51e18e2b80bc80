from typing import Dict, List, Optional, Union

import structlog

from smartagent.config import TaskSettings
from smartagent.domain.models.task_state import Task, TaskContext, TaskKind, TaskResult, TaskStatus
from smartagent.domain.prompt.prompt_composer import PromptComposer, PromptContext
from smartagent.domain.prompt.standards import Surface
from smartagent.errors import ExecutorError, TaskNotFoundError, TaskStateError
from smartagent.infrastructure.observability.logging import agent_logger
from smartagent.infrastructure.util.clock import Clock, SystemClock
from smartagent.infrastructure.util.ids import IdGenerator, UuidIdGenerator

from .task_executor import Executor, run_executor
from .task_templates import TaskTemplateRegistry
from .task_validator import TaskOutputValidator

logger = structlog.get_logger(__name__)


class TaskManager:
    """Creates tasks, composes their prompts, runs them and scores the output"""

    def __init__(
        self,
        composer: Optional[PromptComposer] = None,
        settings: Optional[TaskSettings] = None,
        clock: Optional[Clock] = None,
        ids: Optional[IdGenerator] = None,
    ):
        self.composer = composer or PromptComposer()
        self.settings = settings or TaskSettings()
        self.clock = clock or SystemClock()
        self.ids = ids or UuidIdGenerator()
        self.templates = TaskTemplateRegistry()
        self.validator = TaskOutputValidator(self.composer.standards, self.settings)
        self.tasks: Dict[str, Task] = {}

    def create_task(
        self,
        kind: TaskKind,
        title: str,
        description: str,
        context: Optional[TaskContext] = None,
        rules: Optional[List[str]] = None,
    ) -> Task:
        task = Task(
            id=self.ids.new_id("task"),
            kind=TaskKind(kind),
            title=title,
            description=description,
            context=context or TaskContext(),
            rules=list(rules or []),
            created_at=self.clock.now(),
        )
        self.tasks[task.id] = task
        logger.info("Task created", task_id=task.id, kind=task.kind.value, title=title)
        return task

    def get_task(self, task_id: str) -> Task:
        task = self.tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def list_tasks(self, status: Optional[TaskStatus] = None) -> List[Task]:
        tasks = list(self.tasks.values())
        if status is not None:
            tasks = [t for t in tasks if t.status == TaskStatus(status)]
        return tasks

    def _prompt_context(self, task: Task, surface: Optional[Surface] = None) -> PromptContext:
        return PromptContext(
            task=task.kind,
            component=task.context.component,
            feature=task.context.feature,
            target_directory=task.context.target_directory,
            additional_rules=list(task.rules),
            surface=surface,
        )

    def generate_task_prompt(self, task_id: str) -> str:
        task = self.get_task(task_id)
        return self.composer.compose(self.templates.build_task_prompt(task), self._prompt_context(task))

    def generate_surface_prompt(self, task_id: str, surface: Optional[Union[Surface, str]]) -> str:
        task = self.get_task(task_id)
        try:
            resolved = Surface(surface) if surface is not None else None
        except ValueError:
            resolved = None
        return self.composer.compose_for_surface(
            self.templates.build_task_prompt(task),
            surface,
            self._prompt_context(task, resolved),
        )

    async def execute_task(
        self,
        task_id: str,
        executor: Executor,
        surface: Optional[Union[Surface, str]] = None,
    ) -> TaskResult:
        """Run a pending task through ``executor`` and attach the scored result

        Only a failing executor marks the task failed; a low score still
        completes it, with warnings on the result.
        """

        task = self.get_task(task_id)
        if task.status != TaskStatus.PENDING:
            raise TaskStateError(f"Task {task_id} is {task.status.value}, only pending tasks can be executed")

        self._transition(task, TaskStatus.IN_PROGRESS)

        try:
            prompt = self.generate_surface_prompt(task_id, surface)
            output = await run_executor(executor, prompt)
        except ExecutorError as e:
            result = TaskResult(
                success=False,
                message=f"Task execution failed: {e}",
                errors=[str(e)],
            )
            self._transition(task, TaskStatus.FAILED, result)
            return result

        result = self.validator.validate(task.kind, output)
        self._transition(task, TaskStatus.COMPLETED, result)
        return result

    def _transition(self, task: Task, status: TaskStatus, result: Optional[TaskResult] = None):
        previous = task.status
        task.status = status
        if result is not None:
            task.result = result
        task.updated_at = self.clock.now()

        agent_logger.log_task_transition(
            task.id,
            previous.value,
            status.value,
            score=result.validation_score if result else None,
        )
