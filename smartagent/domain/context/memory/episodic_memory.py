from typing import List, Optional
from datetime import datetime

from smartagent.domain.models.memory import EpisodicMemoryState, Interaction, Outcome, Session


class EpisodicMemory:
    """Append-only record of sessions, interactions and their outcomes"""

    def __init__(self):
        self.sessions: List[Session] = []
        self.interactions: List[Interaction] = []
        self.outcomes: List[Outcome] = []

    def start_session(self, session_id: str, user: str, goals: List[str], now: datetime) -> Session:
        session = Session(id=session_id, start_time=now, user=user, goals=list(goals))
        self.sessions.append(session)
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        return next((s for s in self.sessions if s.id == session_id), None)

    def end_session(
        self,
        session_id: str,
        now: datetime,
        satisfaction: Optional[float] = None,
        lessons_learned: Optional[List[str]] = None,
    ) -> Optional[Session]:
        session = self.get_session(session_id)
        if session is None:
            return None

        session.end_time = now
        if satisfaction is not None:
            session.satisfaction = max(0.0, min(100.0, satisfaction))
        if lessons_learned:
            session.lessons_learned.extend(lessons_learned)
        return session

    def complete_task(self, session_id: str, task_id: str) -> bool:
        session = self.get_session(session_id)
        if session is None:
            return False
        session.tasks_completed.append(task_id)
        return True

    def add_interaction(self, interaction: Interaction):
        self.interactions.append(interaction)

    def interactions_for(self, session_id: str) -> List[Interaction]:
        return [i for i in self.interactions if i.session_id == session_id]

    def add_outcome(self, outcome: Outcome):
        self.outcomes.append(outcome)

    def average_satisfaction(self) -> float:
        """Mean satisfaction over sessions that were rated"""
        rated = [s.satisfaction for s in self.sessions if s.satisfaction > 0]
        if not rated:
            return 0.0
        return sum(rated) / len(rated)

    def to_state(self) -> EpisodicMemoryState:
        return EpisodicMemoryState(
            sessions=list(self.sessions),
            interactions=list(self.interactions),
            outcomes=list(self.outcomes),
        )

    def restore(self, state: EpisodicMemoryState):
        self.sessions = list(state.sessions)
        self.interactions = list(state.interactions)
        self.outcomes = list(state.outcomes)
