"""
Keyword similarity and word-level alignment of clause text.

Similarity is Jaccard overlap of keyword sets. Matching sections and
suggested replacements come from a difflib alignment over word tokens,
reported as character offsets in the source strings.
"""

import difflib
import re
from dataclasses import dataclass

import structlog

from contract_compliance.config import get_settings
from contract_compliance.models.clause import (
    ClauseLibrary,
    ClauseTemplateMatch,
    MatchingSection,
    SmartSuggestionRequest,
    SuggestedReplacement,
)
from contract_compliance.rules.matcher import has_implementation_language, has_specific_details

logger = structlog.get_logger(__name__)


STOP_WORDS = frozenset({
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
})

MIN_KEYWORD_LENGTH = 4

_WORD_RE = re.compile(r"\S+")
_NON_WORD_RE = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class Token:
    """A whitespace-delimited word and its character span."""
    text: str
    start: int
    end: int

    @property
    def norm(self) -> str:
        """Case- and punctuation-insensitive comparison key."""
        return _NON_WORD_RE.sub("", self.text.lower()) or self.text.lower()


def tokenize(text: str) -> list[Token]:
    """Split text into word tokens, keeping character offsets."""
    return [Token(m.group(0), m.start(), m.end()) for m in _WORD_RE.finditer(text)]


def span_text(text: str, tokens: list[Token], i1: int, i2: int) -> tuple[int, int, str]:
    """Character span and text covered by tokens[i1:i2]."""
    if i1 >= i2:
        pos = tokens[i1].start if i1 < len(tokens) else len(text)
        return pos, pos, ""
    start, end = tokens[i1].start, tokens[i2 - 1].end
    return start, end, text[start:end]


def align(a: list[Token], b: list[Token]) -> difflib.SequenceMatcher:
    return difflib.SequenceMatcher(None, [t.norm for t in a], [t.norm for t in b], autojunk=False)


def extract_keywords(text: str) -> list[str]:
    """
    Extract comparison keywords from text.

    Lowercases, replaces punctuation with spaces and keeps words of four
    or more characters that are not stop words.
    """
    words = _NON_WORD_RE.sub(" ", text.lower()).split()
    return [w for w in words if len(w) >= MIN_KEYWORD_LENGTH and w not in STOP_WORDS]


def similarity(text1: str, text2: str) -> float:
    """Jaccard similarity of the two texts' keyword sets."""
    words1 = set(extract_keywords(text1))
    words2 = set(extract_keywords(text2))
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


class SimilarityMatcher:
    """Finds library templates similar to a clause."""

    def __init__(self, threshold: float | None = None, min_section_words: int = 3):
        self.threshold = get_settings().similarity_threshold if threshold is None else threshold
        self.min_section_words = min_section_words

    def similarity(self, text1: str, text2: str) -> float:
        return similarity(text1, text2)

    def find_similar_clauses(
        self,
        clause_text: str,
        library: ClauseLibrary,
        request: SmartSuggestionRequest,
    ) -> list[ClauseTemplateMatch]:
        """
        Rank library templates by similarity to a clause.

        Only templates in the request's category that share at least one
        compliance framework with the request are considered.
        """
        excluded = set(request.exclude_templates)
        frameworks = set(request.compliance_frameworks)
        matches: list[ClauseTemplateMatch] = []

        for template in library.clauses:
            if template.id in excluded:
                continue
            if template.category != request.category:
                continue
            if not frameworks & set(template.compliance_frameworks):
                continue

            score = self.similarity(clause_text, template.content)
            if score > self.threshold:
                matches.append(ClauseTemplateMatch(
                    template=template,
                    similarity=score,
                    matching_sections=self.find_matching_sections(clause_text, template.content),
                    suggested_replacements=self.generate_replacements(clause_text, template.content),
                ))

        matches.sort(key=lambda m: m.similarity, reverse=True)

        logger.debug(
            "similar_clauses_found",
            library_id=library.id,
            category=request.category.value,
            candidates=len(library.clauses),
            matches=len(matches),
        )
        return matches

    def find_matching_sections(self, original: str, template: str) -> list[MatchingSection]:
        """Runs of at least min_section_words words shared with the template."""
        a, b = tokenize(original), tokenize(template)
        sections = []
        for block in align(a, b).get_matching_blocks():
            if block.size < self.min_section_words:
                continue
            start, end, content = span_text(template, b, block.b, block.b + block.size)
            sections.append(MatchingSection(start=start, end=end, content=content))
        return sections

    def generate_replacements(self, original: str, template: str) -> list[SuggestedReplacement]:
        """Passages of the clause that the template words differently."""
        a, b = tokenize(original), tokenize(template)
        replacements = []
        for tag, i1, i2, j1, j2 in align(a, b).get_opcodes():
            if tag != "replace":
                continue
            _, _, old = span_text(original, a, i1, i2)
            _, _, new = span_text(template, b, j1, j2)
            replacements.append(SuggestedReplacement(
                original=old,
                replacement=new,
                reasoning=replacement_reasoning(old, new),
            ))
        return replacements


def replacement_reasoning(old: str, new: str) -> str:
    if has_implementation_language(new) and not has_implementation_language(old):
        return "Template wording states the obligation explicitly."
    if has_specific_details(new) and not has_specific_details(old):
        return "Template wording adds specific timeframes or procedures."
    return "Aligns wording with the approved library template."
