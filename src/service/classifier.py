"""Rule-based classifier deciding which posts belong in the feed.

The feed highlights tech discussions written up as a thread, blog post,
tutorial or deep dive. A post is accepted once its fragments, scanned in
order, have shown both programming/hardware vocabulary and a sign of
long-form writing.
"""
from __future__ import annotations

import re
import threading
from logging import Logger
from typing import Callable, Iterable, Optional, Sequence

from better_profanity import profanity

from ..config.feed_terms import DENYLIST_TERMS, NARRATIVE_TERMS, TOPIC_TERMS
from ..domain.models import FragmentKind, PostScoring, TextFragment


def compile_terms(terms: Iterable[str]) -> re.Pattern[str]:
    """Join regex alternatives into one case-insensitive whole-word pattern."""
    return re.compile(r"\b(?:" + "|".join(terms) + r")\b", re.IGNORECASE)


class PostClassifier:
    """Scores extracted post text and decides inclusion.

    Classification is total: any input, including an empty one, yields either
    a PostScoring or None.
    """

    TOPIC_WEIGHTS = {
        FragmentKind.POST: 10,
        FragmentKind.IMAGE: 15,
        FragmentKind.VIDEO: 15,
        FragmentKind.EXTERNAL: 15,
    }

    NARRATIVE_WEIGHTS = {
        FragmentKind.POST: 30,
        FragmentKind.IMAGE: 30,
        FragmentKind.VIDEO: 15,
        FragmentKind.EXTERNAL: 30,
    }

    def __init__(
        self,
        logger: Logger,
        topic_terms: Sequence[str] = TOPIC_TERMS,
        narrative_terms: Sequence[str] = NARRATIVE_TERMS,
        denylist_terms: Sequence[str] = DENYLIST_TERMS,
        is_unsafe: Optional[Callable[[str], bool]] = None,
    ) -> None:
        """Initialize classifier.

        Args:
            logger: Logger instance
            topic_terms: Regex alternatives for on-topic jargon
            narrative_terms: Regex alternatives for long-form markers
            denylist_terms: Regex alternatives for excluded topics
            is_unsafe: Inappropriate-content detector (default: better-profanity)
        """
        self.logger = logger
        self.topic_pattern = compile_terms(topic_terms)
        self.narrative_pattern = compile_terms(narrative_terms)
        self.denylist_pattern = compile_terms(denylist_terms)
        self.is_unsafe = is_unsafe or profanity.contains_profanity

        self._stats_lock = threading.Lock()
        self._stats = {
            "processed": 0,
            "accepted": 0,
            "rejected_unsafe": 0,
            "rejected_denylist": 0,
            "no_match": 0,
        }

    def classify(self, fragments: Iterable[TextFragment]) -> Optional[PostScoring]:
        """Decide whether a post belongs in the feed.

        Fragments are scanned in order. An unsafe or denylisted fragment
        rejects the whole post. Matching fragments add their kind's weight to
        the priority, and the scan stops as soon as both the topic and the
        long-form signals have been seen.

        Args:
            fragments: Tagged text fragments, body first

        Returns:
            PostScoring for accepted posts, None otherwise
        """
        fits_topic = False
        is_narrative = False
        score = 0

        for fragment in fragments:
            text = fragment.text or ""

            if self.is_unsafe(text):
                if self.topic_pattern.search(text):
                    self.logger.info("False positive to check?: %s", text)
                self._record("rejected_unsafe")
                return None

            if self.denylist_pattern.search(text):
                self._record("rejected_denylist")
                return None

            if self.topic_pattern.search(text):
                score += self.TOPIC_WEIGHTS[fragment.kind]
                fits_topic = True

            if self.narrative_pattern.search(text):
                score += self.NARRATIVE_WEIGHTS[fragment.kind]
                is_narrative = True

            if fits_topic and is_narrative:
                self._record("accepted")
                return PostScoring(pinned=False, deleted=False, priority=score)

        self._record("no_match")
        return None

    def classify_text(self, text: str) -> Optional[PostScoring]:
        """Classify a bare post body."""
        return self.classify([TextFragment.post(text)])

    def _record(self, outcome: str) -> None:
        with self._stats_lock:
            self._stats["processed"] += 1
            self._stats[outcome] += 1

    def get_stats(self) -> dict:
        """Get classification counters."""
        with self._stats_lock:
            return dict(self._stats)
