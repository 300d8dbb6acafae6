"""Tests for slot state and the batch-shared objects."""

import pytest

from quizcore.config.settings import Settings
from quizcore.graph.shared import AttemptBudget, NoveltySet
from quizcore.graph.state import create_initial_state
from quizcore.models.question import GenerationRequest, QuestionType


class TestCreateInitialState:
    """Test create_initial_state()."""

    def test_defaults(self, sample_request: GenerationRequest, fast_settings: Settings):
        """Test the state before the first attempt."""
        state = create_initial_state(sample_request, QuestionType.MULTIPLE_CHOICE, 0, fast_settings)

        assert state["request"] == sample_request
        assert state["attempt"] == 0
        assert state["max_attempts"] == 3
        assert state["temperature"] == fast_settings.base_temperature
        assert state["current"] is None
        assert state["outcomes"] == []
        assert state["question"] is None
        assert state["used_fallback"] is False

    def test_variation_offset_by_slot(self, sample_request: GenerationRequest, fast_settings: Settings):
        """Test that each slot starts on its own prompt variation."""
        request = sample_request.model_copy(update={"variation": 4})

        state = create_initial_state(request, QuestionType.TRUE_FALSE, 2, fast_settings)

        assert state["variation"] == 6
        assert state["slot"] == 2


class TestNoveltySet:
    """Test the shared novelty set."""

    def test_seeded_with_history(self):
        """Test that history is included and blanks skipped."""
        novelty = NoveltySet(["What is a cell?", ""])

        assert novelty.snapshot() == ("What is a cell?",)
        assert novelty.accepted == ()

    def test_accepted_tracks_additions(self):
        """Test that additions are kept in order and separate from history."""
        novelty = NoveltySet(["Old question?"])
        novelty.add("First new question?")
        novelty.add("Second new question?")

        assert len(novelty) == 3
        assert novelty.accepted == ("First new question?", "Second new question?")
        assert list(novelty) == ["Old question?", "First new question?", "Second new question?"]

    def test_snapshot_is_frozen(self):
        """Test that a snapshot does not change after later additions."""
        novelty = NoveltySet()
        snapshot = novelty.snapshot()
        novelty.add("A later question?")

        assert snapshot == ()


class TestAttemptBudget:
    """Test the shared attempt budget."""

    def test_spends_until_empty(self):
        """Test that spending stops at the total."""
        budget = AttemptBudget(2)

        assert budget.try_spend()
        assert budget.try_spend()
        assert not budget.try_spend()
        assert budget.spent == 2
        assert budget.remaining == 0

    def test_zero_budget(self):
        """Test that an empty budget refuses every attempt."""
        assert not AttemptBudget(0).try_spend()

    def test_negative_budget_rejected(self):
        """Test that a negative total is an error."""
        with pytest.raises(ValueError):
            AttemptBudget(-1)
