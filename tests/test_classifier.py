"""Tests for PostClassifier scoring and rejection rules."""

from logging import Logger
from unittest.mock import Mock

import pytest

from src.domain.models import PostScoring, TextFragment
from src.service.classifier import PostClassifier, compile_terms


def _never_unsafe(text: str) -> bool:
    return False


def _flags_badword(text: str) -> bool:
    return "badword" in text.lower()


@pytest.fixture
def classifier():
    """Classifier with a deterministic safety check."""
    return PostClassifier(Mock(spec=Logger), is_unsafe=_flags_badword)


class TestCompileTerms:
    """Test term pattern compilation."""

    def test_matches_whole_words_case_insensitive(self):
        """Alternatives match as whole words regardless of case."""
        pattern = compile_terms(["rust", "deep dive"])

        assert pattern.search("Learning RUST today")
        assert pattern.search("a Deep Dive into it")
        assert not pattern.search("trusty old laptop")


class TestPostClassifier:
    """Test PostClassifier.classify."""

    def test_topic_without_narrative_is_rejected(self, classifier):
        """Topic alone is not enough."""
        assert classifier.classify([TextFragment.post("just a random rust mention")]) is None

    def test_topic_and_narrative_in_body(self, classifier):
        """Body matches give topic +10 and narrative +30."""
        result = classifier.classify(
            [TextFragment.post("Here's a deep dive tutorial on Rust embedded dev")]
        )

        assert result == PostScoring(pinned=False, deleted=False, priority=40)

    def test_signals_across_fragments_accumulate(self, classifier):
        """Topic and narrative may come from different fragments."""
        result = classifier.classify(
            [
                TextFragment.post("I finally did it"),
                TextFragment.image("an Arduino on a breadboard"),
                TextFragment.external("My blog: the whole story"),
            ]
        )

        assert result is not None
        assert result.priority == 15 + 30

    def test_video_narrative_weight(self, classifier):
        """Video fragments weigh 15 for narrative."""
        result = classifier.classify(
            [
                TextFragment.post("Python"),
                TextFragment.video("tutorial walkthrough"),
            ]
        )

        assert result is not None
        assert result.priority == 10 + 15

    def test_scan_stops_at_acceptance(self, classifier):
        """Fragments after acceptance are not scored or checked."""
        result = classifier.classify(
            [
                TextFragment.post("A Linux kernel thread"),
                TextFragment.image("badword elon"),
            ]
        )

        assert result is not None
        assert result.priority == 40

    def test_unsafe_fragment_rejects_post(self, classifier):
        """Unsafe text rejects the post even when topic and narrative match."""
        result = classifier.classify(
            [TextFragment.post("badword"), TextFragment.post("Rust tutorial thread")]
        )

        assert result is None

    def test_unsafe_topic_match_logs_false_positive(self, classifier):
        """Unsafe text that also matches the topic is logged for review."""
        assert classifier.classify([TextFragment.post("badword python guide")]) is None

        classifier.logger.info.assert_called_once()
        assert "False positive" in classifier.logger.info.call_args[0][0]

    def test_denylist_rejects_post(self, classifier):
        """Denylisted topics reject the post."""
        result = classifier.classify([TextFragment.post("A thread on Python and government")])

        assert result is None

    def test_empty_input(self, classifier):
        """No fragments means no match."""
        assert classifier.classify([]) is None

    def test_empty_text_fragment(self, classifier):
        """Empty text never matches."""
        assert classifier.classify([TextFragment.post("")]) is None

    def test_classify_text(self, classifier):
        """classify_text treats the text as a post body."""
        assert classifier.classify_text("Rust blog post").priority == 40

    def test_stats_count_outcomes(self, classifier):
        """Every classification is counted by outcome."""
        classifier.classify_text("Rust blog post")
        classifier.classify_text("badword")
        classifier.classify_text("trump")
        classifier.classify_text("nothing to see")

        assert classifier.get_stats() == {
            "processed": 4,
            "accepted": 1,
            "rejected_unsafe": 1,
            "rejected_denylist": 1,
            "no_match": 1,
        }

    def test_custom_terms(self):
        """Term lists can be replaced."""
        classifier = PostClassifier(
            Mock(spec=Logger),
            topic_terms=["zig"],
            narrative_terms=["notes"],
            denylist_terms=["spam"],
            is_unsafe=_never_unsafe,
        )

        assert classifier.classify_text("Zig notes").priority == 40
        assert classifier.classify_text("Rust blog post") is None

    def test_default_safety_check_accepts_clean_text(self):
        """The default profanity check lets clean on-topic posts through."""
        classifier = PostClassifier(Mock(spec=Logger))

        result = classifier.classify_text("Here's a deep dive tutorial on Rust embedded dev")

        assert result is not None
        assert result.priority == 40
