"""
Unit tests for issue/inquiry classification.
"""

import pytest

from ragdesk.core import GapType
from ragdesk.gaps import KeywordGapClassifier, LLMGapClassifier, make_classifier

from conftest import FakeLLMClient, llm_error


class TestKeywordGapClassifier:
    """Keyword tally with ties going to inquiry."""

    @pytest.fixture
    def classifier(self):
        return KeywordGapClassifier()

    def test_broken_login_is_issue(self, classifier):
        query = "The login button is completely broken and nothing works"

        scores = classifier.scores(query)

        assert scores["issue"] > scores["inquiry"]
        assert classifier.classify(query) == GapType.ISSUE

    def test_password_reset_is_inquiry(self, classifier):
        assert classifier.classify("How do I reset my password?") == GapType.INQUIRY

    def test_tie_goes_to_inquiry(self, classifier):
        """One issue keyword against one inquiry keyword."""
        query = "Why does the export show an error"

        assert classifier.scores(query) == {"issue": 1, "inquiry": 1}
        assert classifier.classify(query) == GapType.INQUIRY

    def test_no_keywords_is_inquiry(self, classifier):
        assert classifier.classify("Pricing tiers for enterprise customers") == GapType.INQUIRY

    def test_keyword_counted_once(self, classifier):
        assert classifier.scores("error error error everywhere")["issue"] == 1

    def test_whole_words_only(self, classifier):
        """'can' must not match inside "can't" or 'scanner'."""
        scores = classifier.scores("I can't use the scanner")

        assert scores["inquiry"] == 0
        assert scores["issue"] == 1

    def test_case_insensitive(self, classifier):
        assert classifier.scores("CRASH on startup")["issue"] == 1


class TestLLMGapClassifier:
    """Fails safe to inquiry."""

    def test_issue_answer(self):
        client = FakeLLMClient("ISSUE")

        assert LLMGapClassifier(client).classify("The app crashes on launch") == GapType.ISSUE
        assert client.calls[0]["max_tokens"] == 10
        assert "The app crashes on launch" in client.calls[0]["user_message"]

    def test_inquiry_answer(self):
        assert LLMGapClassifier(FakeLLMClient("inquiry")).classify("How do refunds work") == GapType.INQUIRY

    def test_unexpected_answer_is_inquiry(self):
        assert LLMGapClassifier(FakeLLMClient("maybe?")).classify("Something odd here") == GapType.INQUIRY

    def test_model_error_is_inquiry(self):
        assert LLMGapClassifier(FakeLLMClient(llm_error())).classify("The app crashes") == GapType.INQUIRY

    def test_client_exception_is_inquiry(self):
        client = FakeLLMClient(RuntimeError("connection reset"))

        assert LLMGapClassifier(client).classify("The app crashes") == GapType.INQUIRY


class TestMakeClassifier:

    def test_default_is_keyword(self):
        assert isinstance(make_classifier({}), KeywordGapClassifier)

    def test_llm(self):
        classifier = make_classifier({"gaps": {"classifier": "llm"}}, client=FakeLLMClient())

        assert isinstance(classifier, LLMGapClassifier)

    def test_llm_without_client(self):
        with pytest.raises(SystemExit):
            make_classifier({"gaps": {"classifier": "llm"}})

    def test_unknown(self):
        with pytest.raises(SystemExit):
            make_classifier({"gaps": {"classifier": "bayes"}})
