"""Chat query orchestration: retrieve, answer, and log knowledge gaps."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core import ChatTurn, GapRecord, GapType, ProjectInfo, QueryState, SimilarityResult
from ..core.exceptions import GenerationError
from ..gaps import GapClassifier, GapFilter, GapRecorder
from ..prompt import PromptBuilder
from ..search import SUFFICIENCY_THRESHOLD, Searcher, is_sufficient

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ChatResult:
    response: str
    context: Optional[List[SimilarityResult]]
    knowledge_gap: bool = False
    knowledge_gap_type: Optional[GapType] = None
    gap: Optional[GapRecord] = None
    project: Optional[ProjectInfo] = None
    states: List[QueryState] = dataclasses.field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        project = self.project
        return {
            "response": self.response,
            "context": [r.to_dict() for r in self.context] if self.context else None,
            "knowledgeGap": self.knowledge_gap,
            "knowledgeGapType": self.knowledge_gap_type.value if self.knowledge_gap_type else None,
            "projectInfo": {
                "name": project.name,
                "description": project.description,
                "plan": project.plan,
            } if project else None,
        }


def split_history(query: str, chat_history: Sequence[ChatTurn]) -> Tuple[List[Dict[str, str]], str]:
    """Prior turns for the model, and the user message to send.

    When the history already ends with a user turn, that turn is the message;
    otherwise the query is sent after the full history.
    """
    turns = [{"role": t.role, "content": t.content} for t in chat_history]
    if turns and turns[-1]["role"] == "user":
        last = turns.pop()
        return turns, last["content"]
    return turns, query


class QueryOrchestrator:
    """Answers chat queries against a project's knowledge base.

    Retrieval that does not clear the sufficiency bar sends the query through
    the gap filter, the classifier and the recorder. Gap logging never blocks
    the answer; a failed generation does, and then no gap is logged.
    """

    def __init__(
        self,
        searcher: Searcher,
        llm_client: Any,
        gap_filter: GapFilter,
        classifier: GapClassifier,
        recorder: GapRecorder,
        prompt_builder: PromptBuilder,
        threshold: float = 0.4,
        match_count: int = 5,
        sufficiency_threshold: float = SUFFICIENCY_THRESHOLD,
        gaps_enabled: bool = True,
    ):
        self.searcher = searcher
        self.llm_client = llm_client
        self.gap_filter = gap_filter
        self.classifier = classifier
        self.recorder = recorder
        self.prompt_builder = prompt_builder
        self.threshold = threshold
        self.match_count = match_count
        self.sufficiency_threshold = sufficiency_threshold
        self.gaps_enabled = gaps_enabled

    def retrieve(self, query: str, project: ProjectInfo, threshold: Optional[float] = None) -> List[SimilarityResult]:
        return self.searcher.search(
            query,
            project_id=project.id,
            user_id=project.user_id,
            threshold=self.threshold if threshold is None else threshold,
            limit=self.match_count,
        )

    def generate(self, query: str, chat_history: Sequence[ChatTurn], hits: List[SimilarityResult], project: ProjectInfo) -> str:
        system_prompt = self.prompt_builder.build_prompt(query, hits, project)
        history, message = split_history(query, chat_history)
        response = self.llm_client.chat(
            system_prompt=system_prompt,
            user_message=message,
            conversation_history=history,
        )
        if response.error:
            raise GenerationError(f"Failed to generate response: {response.error}")
        return response.content

    def log_gap(self, query: str, project: ProjectInfo, states: List[QueryState]) -> Optional[GapRecord]:
        """Filter, classify and persist an unanswered query. Returns the record when one was created."""
        verdict = self.gap_filter.evaluate(query)
        if not verdict:
            logger.debug(f"Query not substantial ({verdict.rejected_by}), no gap logged")
            states.append(QueryState.FILTERED_OUT)
            return None

        states.append(QueryState.CLASSIFY)
        gap_type = self.classifier.classify(query)
        states.append(QueryState.ISSUE if gap_type == GapType.ISSUE else QueryState.INQUIRY)

        record = self.recorder.record(gap_type, query, project_id=project.id, user_id=project.user_id)
        if record is not None:
            states.append(QueryState.LOGGED)
        return record

    def answer(
        self,
        query: str,
        chat_history: Sequence[ChatTurn],
        project: ProjectInfo,
        threshold: Optional[float] = None,
    ) -> ChatResult:
        states = [QueryState.RETRIEVE]
        hits = self.retrieve(query, project, threshold)
        sufficient = is_sufficient(hits, self.sufficiency_threshold)
        states.append(QueryState.SUFFICIENT if sufficient else QueryState.INSUFFICIENT)

        response = self.generate(query, chat_history, hits, project)

        gap = None
        if not sufficient and self.gaps_enabled:
            try:
                gap = self.log_gap(query, project, states)
            except Exception as e:
                logger.error(f"Knowledge gap logging failed for project {project.id}: {e}")

        return ChatResult(
            response=response,
            context=hits or None,
            knowledge_gap=gap is not None,
            knowledge_gap_type=gap.gap_type if gap else None,
            gap=gap,
            project=project,
            states=states,
        )
