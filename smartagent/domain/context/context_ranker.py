from typing import List

from smartagent.domain.models.context import ContextItem, ContextWindow


class ContextRanker:
    """Orders candidate items and packs them into a token budget"""

    def __init__(self, max_tokens: int = 8000):
        self.max_tokens = max_tokens

    def rank_by_relevance(self, items: List[ContextItem]) -> List[ContextItem]:
        """Highest priority first; newer items win ties"""
        return sorted(items, key=lambda item: (item.priority, item.added_at), reverse=True)

    def optimize_window(self, items: List[ContextItem]) -> ContextWindow:
        """Single greedy pass with replace-lowest

        An item that does not fit may take the place of the lowest priority
        item already selected, provided its priority is strictly higher and
        the swap keeps the total within budget. This is not a knapsack.
        """

        included: List[ContextItem] = []
        current_tokens = 0

        for item in items:
            if current_tokens + item.tokens <= self.max_tokens:
                included.append(item)
                current_tokens += item.tokens
                continue

            if not included:
                continue

            # First of equal-priority minima
            lowest = min(included, key=lambda i: i.priority)
            replaced_total = current_tokens - lowest.tokens + item.tokens
            if lowest.priority < item.priority and replaced_total <= self.max_tokens:
                included[included.index(lowest)] = item
                current_tokens = replaced_total

        return ContextWindow(max_tokens=self.max_tokens, current_tokens=current_tokens, items=included)
