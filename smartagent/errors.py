class SmartAgentError(Exception):
    """Base class for engine errors"""


class TaskNotFoundError(SmartAgentError, KeyError):
    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id

    def __str__(self) -> str:
        return self.args[0]


class TaskStateError(SmartAgentError):
    """Raised when a task operation does not fit the task's current status"""


class ExecutorError(SmartAgentError):
    """Wraps a failure raised by an injected task executor"""

    def __init__(self, cause: BaseException):
        super().__init__(str(cause) or cause.__class__.__name__)
        self.cause = cause


class RulesNotFoundError(SmartAgentError):
    """No project rule source could be loaded"""
