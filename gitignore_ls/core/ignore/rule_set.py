"""
Rule set model: ordered rules of one document and last-match-wins evaluation
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .matcher import matches_parts, split_path
from .parser import Rule
from gitignore_ls.utils import get_logger

logger = get_logger(__name__)


class OutcomeStatus(Enum):
    UNMATCHED = "unmatched"
    IGNORED = "ignored"
    INCLUDED = "included"


@dataclass(frozen=True)
class MatchOutcome:
    """
    Effective decision for one candidate path.

    ``line_number`` is the deciding rule. When a path is Included but one of
    its ancestor directories is itself Ignored, git never descends into that
    directory; ``blocked_by`` and ``blocked_directory`` report it.
    """
    status: OutcomeStatus
    line_number: Optional[int] = None
    blocked_by: Optional[int] = None
    blocked_directory: Optional[str] = None

    @classmethod
    def unmatched(cls) -> 'MatchOutcome':
        return cls(OutcomeStatus.UNMATCHED)

    @classmethod
    def ignored(cls, line_number: int) -> 'MatchOutcome':
        return cls(OutcomeStatus.IGNORED, line_number)

    @classmethod
    def included(cls, line_number: int) -> 'MatchOutcome':
        return cls(OutcomeStatus.INCLUDED, line_number)

    @property
    def is_ignored(self) -> bool:
        return self.status is OutcomeStatus.IGNORED

    def describe(self) -> str:
        """Human-readable summary using 1-based line numbers"""
        if self.status is OutcomeStatus.UNMATCHED:
            return "not matched by any rule"
        text = f"{self.status.value} by line {self.line_number + 1}"
        if self.blocked_by is not None:
            text += (
                f", but its parent directory '{self.blocked_directory}' is ignored by "
                f"line {self.blocked_by + 1} so git never looks inside it"
            )
        return text


class RuleSet:
    """
    Ordered rules for one document, indexed by line number.

    Order is load-bearing: later rules override earlier ones for the same
    path, so rules are kept exactly in ascending line order.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules = tuple(rules)
        self._by_line: Dict[int, Rule] = {}
        previous = -1
        for rule in self._rules:
            if rule.line_number <= previous:
                raise ValueError(
                    f"Rules must be in ascending line order: line {rule.line_number} "
                    f"follows line {previous}"
                )
            previous = rule.line_number
            self._by_line[rule.line_number] = rule

    @property
    def rules(self) -> Sequence[Rule]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def get(self, line_number: int) -> Optional[Rule]:
        return self._by_line.get(line_number)

    @staticmethod
    def covers(rule: Rule, parts: Sequence[str], is_directory: bool) -> bool:
        """
        True if a rule matches the path or any of its ancestor directories

        Args:
            rule: Rule to test
            parts: Path components
            is_directory: Whether the full path is a directory
        """
        if matches_parts(rule, parts, is_directory):
            return True
        return any(matches_parts(rule, parts[:depth], True) for depth in range(1, len(parts)))

    def _decide(self, parts: Sequence[str], is_directory: bool, direct: bool) -> MatchOutcome:
        outcome = MatchOutcome.unmatched()
        for rule in self._rules:
            if direct:
                hit = matches_parts(rule, parts, is_directory)
            else:
                hit = self.covers(rule, parts, is_directory)
            if hit:
                if rule.negated:
                    outcome = MatchOutcome.included(rule.line_number)
                else:
                    outcome = MatchOutcome.ignored(rule.line_number)
        return outcome

    def effective_outcome(self, candidate_path: str, is_directory: bool = False) -> MatchOutcome:
        """
        Apply last-match-wins across all rules

        Args:
            candidate_path: Path relative to the ignore file's directory
            is_directory: Whether the path names a directory

        Returns:
            MatchOutcome attributed to the deciding rule
        """
        parts = split_path(candidate_path)
        if not parts:
            return MatchOutcome.unmatched()

        outcome = self._decide(parts, is_directory, direct=False)
        if outcome.status is not OutcomeStatus.INCLUDED:
            return outcome

        # The first excluded ancestor stops git from descending any further
        for depth in range(1, len(parts)):
            ancestor = self._decide(parts[:depth], True, direct=True)
            if ancestor.is_ignored:
                logger.debug(
                    f"{'/'.join(parts)} re-included by line {outcome.line_number + 1} "
                    f"under ignored directory {'/'.join(parts[:depth])}"
                )
                return MatchOutcome(
                    OutcomeStatus.INCLUDED,
                    outcome.line_number,
                    blocked_by=ancestor.line_number,
                    blocked_directory='/'.join(parts[:depth]),
                )
        return outcome

    def all_matching_rules(self, candidate_path: str, is_directory: bool = False) -> List[Rule]:
        """
        Every rule that matches the path, in document order

        Args:
            candidate_path: Path relative to the ignore file's directory
            is_directory: Whether the path names a directory

        Returns:
            List of rules; the last one decides the outcome
        """
        parts = split_path(candidate_path)
        if not parts:
            return []
        return [rule for rule in self._rules if self.covers(rule, parts, is_directory)]
