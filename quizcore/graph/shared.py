"""Batch-wide objects shared by every slot of one generation run."""

from collections.abc import Iterable, Iterator


class NoveltySet:
    """
    Question texts a new question must not duplicate.

    Append-only. Seeded with the caller's history, then grows as slots
    accept questions. Readers get a tuple snapshot, so a slot comparing
    against it never sees the collection change underneath it.
    """

    def __init__(self, history: Iterable[str] = ()):
        self._texts: list[str] = [text for text in history if text]
        self._history_size = len(self._texts)

    def add(self, text: str) -> None:
        """Record an accepted question text."""
        self._texts.append(text)

    def snapshot(self) -> tuple[str, ...]:
        """All texts seen so far."""
        return tuple(self._texts)

    @property
    def accepted(self) -> tuple[str, ...]:
        """Texts accepted during this run, in acceptance order."""
        return tuple(self._texts[self._history_size :])

    def __len__(self) -> int:
        return len(self._texts)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())


class AttemptBudget:
    """Cap on generator calls across a whole batch."""

    def __init__(self, total: int):
        if total < 0:
            raise ValueError("Attempt budget cannot be negative")
        self.total = total
        self.spent = 0

    @property
    def remaining(self) -> int:
        return self.total - self.spent

    def try_spend(self) -> bool:
        """Take one attempt from the budget; False when it is used up."""
        if self.spent >= self.total:
            return False
        self.spent += 1
        return True
