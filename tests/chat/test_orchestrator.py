"""
Tests for QueryOrchestrator: retrieval sufficiency, gap logging and answer generation.

Dependencies: pytest, sqlalchemy (in-memory SQLite)
"""

from unittest.mock import MagicMock

import pytest

from ragdesk.chat import QueryOrchestrator, split_history
from ragdesk.core import ChatTurn, GapType, ProjectInfo, QueryState, SimilarityResult, SourceType
from ragdesk.core.exceptions import GenerationError
from ragdesk.gaps import GapFilter, KeywordGapClassifier, SqlGapRecorder
from ragdesk.prompt import AnswerPromptBuilder
from ragdesk.search import Searcher
from ragdesk.web.models import Issue

from conftest import FakeLLMClient, llm_error

ISSUE_QUERY = "The login button is completely broken and nothing works"


def _hit(similarity, content="Reset links expire after one hour.", source_type=SourceType.CONTEXT):
    return SimilarityResult(
        id="r1",
        content=content,
        similarity=similarity,
        metadata={"chunkIndex": 1, "totalChunks": 1},
        source_type=source_type,
        source_id="doc-1",
    )


class FakeSearcher(Searcher):

    def __init__(self, results):
        self.results = results
        self.calls = []

    def search(self, query, project_id, user_id, threshold=0.4, limit=10, source_type=None):
        self.calls.append({
            "query": query,
            "project_id": project_id,
            "user_id": user_id,
            "threshold": threshold,
            "limit": limit,
        })
        return list(self.results)


@pytest.fixture
def make_orchestrator(db_session_factory):
    def factory(results, *responses, recorder=None, **kwargs):
        searcher = FakeSearcher(results)
        client = FakeLLMClient(*(responses or ("Here is what I know.",)))
        orchestrator = QueryOrchestrator(
            searcher=searcher,
            llm_client=client,
            gap_filter=GapFilter(),
            classifier=KeywordGapClassifier(),
            recorder=recorder or SqlGapRecorder(db_session_factory),
            prompt_builder=AnswerPromptBuilder(token_counter=lambda text: len(text.split())),
            **kwargs,
        )
        return orchestrator, searcher, client
    return factory


class TestRetrievalSufficiency:
    """Sufficient only when a hit is strictly above 0.5."""

    def test_strong_hit_is_sufficient(self, make_orchestrator, project):
        orchestrator, _, _ = make_orchestrator([_hit(0.82)])

        result = orchestrator.answer(ISSUE_QUERY, [], project)

        assert result.states == [QueryState.RETRIEVE, QueryState.SUFFICIENT]
        assert result.knowledge_gap is False
        assert result.knowledge_gap_type is None
        assert [r.similarity for r in result.context] == [0.82]

    def test_weak_hit_is_insufficient_and_logged(self, make_orchestrator, project, db_session_factory):
        """0.45 clears the search threshold but not the sufficiency bar."""
        orchestrator, _, _ = make_orchestrator([_hit(0.45)])

        result = orchestrator.answer(ISSUE_QUERY, [], project)

        assert result.states == [
            QueryState.RETRIEVE,
            QueryState.INSUFFICIENT,
            QueryState.CLASSIFY,
            QueryState.ISSUE,
            QueryState.LOGGED,
        ]
        assert result.knowledge_gap is True
        assert result.knowledge_gap_type == GapType.ISSUE
        assert result.context is not None

        db = db_session_factory()
        try:
            row = db.query(Issue).one()
            assert row.description == ISSUE_QUERY
            assert row.project_id == project.id
            assert row.user_id == project.user_id
        finally:
            db.close()

    def test_exactly_half_is_insufficient(self, make_orchestrator, project):
        orchestrator, _, _ = make_orchestrator([_hit(0.5)])

        result = orchestrator.answer("How do I reset my password?", [], project)

        assert QueryState.INSUFFICIENT in result.states
        assert result.knowledge_gap_type == GapType.INQUIRY

    def test_no_hits_and_small_talk(self, make_orchestrator, project):
        orchestrator, _, client = make_orchestrator([])

        result = orchestrator.answer("hi", [], project)

        assert result.states == [QueryState.RETRIEVE, QueryState.INSUFFICIENT, QueryState.FILTERED_OUT]
        assert result.context is None
        assert result.knowledge_gap is False
        assert result.response == "Here is what I know."
        assert "No specific context available for this query." in client.calls[0]["system_prompt"]


class TestGapLoggingIsBestEffort:

    def test_recorder_failure_still_answers(self, make_orchestrator, project):
        recorder = MagicMock()
        recorder.record.return_value = None
        orchestrator, _, _ = make_orchestrator([], recorder=recorder)

        result = orchestrator.answer(ISSUE_QUERY, [], project)

        assert result.response == "Here is what I know."
        assert result.knowledge_gap is False
        assert result.knowledge_gap_type is None
        assert result.states[-1] == QueryState.ISSUE
        recorder.record.assert_called_once_with(
            GapType.ISSUE, ISSUE_QUERY, project_id=project.id, user_id=project.user_id
        )

    def test_recorder_exception_still_answers(self, make_orchestrator, project):
        recorder = MagicMock()
        recorder.record.side_effect = RuntimeError("connection pool exhausted")
        orchestrator, _, _ = make_orchestrator([], recorder=recorder)

        result = orchestrator.answer(ISSUE_QUERY, [], project)

        assert result.response == "Here is what I know."
        assert result.knowledge_gap is False
        assert result.gap is None

    def test_classifier_exception_still_answers(self, make_orchestrator, project):
        classifier = MagicMock()
        classifier.classify.side_effect = RuntimeError("classifier crashed")
        recorder = MagicMock()
        orchestrator, _, _ = make_orchestrator([], recorder=recorder)
        orchestrator.classifier = classifier

        result = orchestrator.answer(ISSUE_QUERY, [], project)

        assert result.response == "Here is what I know."
        assert result.knowledge_gap is False
        assert result.states[-1] == QueryState.CLASSIFY
        recorder.record.assert_not_called()

    def test_generation_failure_logs_nothing(self, make_orchestrator, project):
        recorder = MagicMock()
        orchestrator, _, _ = make_orchestrator([], llm_error("rate limited"), recorder=recorder)

        with pytest.raises(GenerationError):
            orchestrator.answer(ISSUE_QUERY, [], project)

        recorder.record.assert_not_called()

    def test_gaps_disabled(self, make_orchestrator, project):
        recorder = MagicMock()
        orchestrator, _, _ = make_orchestrator([], recorder=recorder, gaps_enabled=False)

        result = orchestrator.answer(ISSUE_QUERY, [], project)

        assert result.states == [QueryState.RETRIEVE, QueryState.INSUFFICIENT]
        recorder.record.assert_not_called()


class TestRetrievalAndPrompt:

    def test_scoped_to_project_owner(self, make_orchestrator, project):
        orchestrator, searcher, _ = make_orchestrator([_hit(0.9)])

        orchestrator.answer("How do I reset my password?", [], project, threshold=0.3)

        assert searcher.calls == [{
            "query": "How do I reset my password?",
            "project_id": project.id,
            "user_id": project.user_id,
            "threshold": 0.3,
            "limit": 5,
        }]

    def test_default_threshold(self, make_orchestrator, project):
        orchestrator, searcher, _ = make_orchestrator([_hit(0.9)])

        orchestrator.answer("How do I reset my password?", [], project)

        assert searcher.calls[0]["threshold"] == 0.4

    def test_prompt_carries_project_and_context(self, make_orchestrator, project):
        orchestrator, _, client = make_orchestrator([_hit(0.9, source_type=SourceType.PRODUCT)])

        orchestrator.answer("How do I reset my password?", [], project)

        prompt = client.calls[0]["system_prompt"]
        assert '"Acme Widgets"' in prompt
        assert "Widgets for everyone" in prompt
        assert "Plan: pro" in prompt
        assert "[PRODUCT] Reset links expire after one hour." in prompt
        assert "How do I reset my password?" in prompt

    def test_result_dict(self, make_orchestrator, project):
        orchestrator, _, _ = make_orchestrator([_hit(0.45)])

        data = orchestrator.answer("How do I reset my password?", [], project).to_dict()

        assert data["knowledgeGap"] is True
        assert data["knowledgeGapType"] == "inquiry"
        assert data["context"][0]["sourceType"] == "context"
        assert data["projectInfo"] == {"name": "Acme Widgets", "description": "Widgets for everyone", "plan": "pro"}


class TestSplitHistory:
    """Which message is sent and which turns go along as history."""

    def test_query_appended_after_assistant_turn(self):
        history = [ChatTurn("user", "Hello there"), ChatTurn("assistant", "Hi! How can I help?")]

        turns, message = split_history("How do I reset my password?", history)

        assert message == "How do I reset my password?"
        assert [t["role"] for t in turns] == ["user", "assistant"]

    def test_trailing_user_turn_is_the_message(self):
        history = [ChatTurn("assistant", "Hi!"), ChatTurn("user", "How do I reset my password?")]

        turns, message = split_history("How do I reset my password?", history)

        assert message == "How do I reset my password?"
        assert turns == [{"role": "assistant", "content": "Hi!"}]

    def test_empty_history(self):
        assert split_history("Where are invoices?", []) == ([], "Where are invoices?")

    def test_history_forwarded_to_model(self, make_orchestrator, project):
        orchestrator, _, client = make_orchestrator([_hit(0.9)])
        history = [ChatTurn("user", "Hello there"), ChatTurn("assistant", "Hi!")]

        orchestrator.answer("How do I reset my password?", history, project)

        assert client.calls[0]["conversation_history"] == [
            {"role": "user", "content": "Hello there"},
            {"role": "assistant", "content": "Hi!"},
        ]
        assert client.calls[0]["user_message"] == "How do I reset my password?"
