from .application.agent_service import SmartAgentService
from .config import SmartAgentSettings

__all__ = ["SmartAgentService", "SmartAgentSettings"]
