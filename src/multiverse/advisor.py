"""
Rule Advisor Boundary
Validation of externally proposed rule sets and an offline keyword advisor
"""

import asyncio
import inspect
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from .errors import InvalidRule, MalformedRuleProposal
from .rules import RuleSet, validate_counts, PRESETS

logger = logging.getLogger(__name__)


RawProposal = Mapping[str, Any]
Advisor = Callable[[str], Union[RawProposal, Awaitable[RawProposal]]]


@dataclass(frozen=True)
class RuleProposal:
    """Validated advisor answer."""
    rules: RuleSet
    explanation: str


@dataclass
class RuleRequest:
    """
    A completed advisor call, tagged with the universe it was made for.

    The engine applies whatever it is given; callers use :meth:`is_stale`
    to drop answers addressed to a universe that is no longer active.
    """
    universe_id: Optional[str]
    intent: str
    proposal: RuleProposal

    def is_stale(self, active_id: Optional[str]) -> bool:
        return self.universe_id != active_id


def validate_proposal(raw: RawProposal) -> RuleProposal:
    """
    Validate a raw advisor response.

    Args:
        raw: Mapping with ``birth`` and ``survival`` integer lists and an
            optional ``explanation`` string

    Returns:
        RuleProposal with a constructed RuleSet
    """
    if not isinstance(raw, Mapping):
        raise MalformedRuleProposal(f"Proposal must be a mapping, got {type(raw).__name__}")

    for key in ('birth', 'survival'):
        if key not in raw:
            raise MalformedRuleProposal(f"Proposal missing {key!r}")
        if not isinstance(raw[key], (list, tuple)):
            raise MalformedRuleProposal(f"Proposal {key!r} must be a list, got {raw[key]!r}")

    explanation = raw.get('explanation', "")
    if not isinstance(explanation, str):
        raise MalformedRuleProposal("Proposal explanation must be a string")

    # Values are validated, never clamped
    birth = validate_counts(raw['birth'], "birth", error=MalformedRuleProposal)
    survival = validate_counts(raw['survival'], "survival", error=MalformedRuleProposal)

    return RuleProposal(rules=RuleSet(birth=birth, survival=survival), explanation=explanation)


async def request_rule(
    advisor: Advisor,
    intent: str,
    universe_id: Optional[str] = None
) -> RuleRequest:
    """
    Ask an advisor for a rule and validate the answer.

    Synchronous advisors run in a worker thread so the event loop driving
    the simulation is never blocked.

    Args:
        advisor: Callable taking free text and returning (or awaiting) a
            raw proposal
        intent: Free-text description of the desired behaviour
        universe_id: Universe the request is made for

    Returns:
        RuleRequest holding the validated proposal
    """
    if inspect.iscoroutinefunction(advisor):
        raw = await advisor(intent)
    else:
        raw = await asyncio.to_thread(advisor, intent)
        if inspect.isawaitable(raw):
            raw = await raw

    proposal = validate_proposal(raw)
    logger.info(f"Advisor proposed {proposal.rules} for {intent!r}")

    return RuleRequest(universe_id=universe_id, intent=intent, proposal=proposal)


# Keyword -> preset, checked in order
KEYWORD_PRESETS = [
    (('explode', 'explosive', 'grow', 'growth', 'spread'), 'seeds'),
    (('maze', 'labyrinth', 'corridor'), 'maze'),
    (('replicate', 'copy', 'copies', 'self-replicating'), 'replicator'),
    (('symmetric', 'symmetry', 'mirror', 'balance', 'yin', 'yang'), 'day_and_night'),
    (('blob', 'amoeba', 'organic'), 'diamoeba'),
    (('coral', 'reef'), 'coral'),
    (('ink', 'fill', 'never die', 'immortal'), 'life_without_death'),
    (('melt', 'anneal', 'smooth'), 'anneal'),
    (('block', 'blocks', 'square'), 'two_by_two'),
    (('ship', 'spaceship', 'fly', 'glide', 'moving'), 'highlife'),
]


def keyword_advisor(intent: str) -> Dict[str, Any]:
    """
    Offline advisor mapping intent keywords onto rule presets.

    Also honours literal ``B../S..`` notation embedded in the text.

    Args:
        intent: Free-text description

    Returns:
        Raw proposal mapping (``birth``, ``survival``, ``explanation``)
    """
    text = intent.lower()

    literal = re.search(r'\bb\d*/s\d*\b', text)
    if literal:
        try:
            rules = RuleSet.from_notation(literal.group(0))
        except InvalidRule:
            rules = None
        if rules is not None:
            return {
                'birth': sorted(rules.birth),
                'survival': sorted(rules.survival),
                'explanation': f"Using the rule {rules} given in the request."
            }

    for keywords, preset in KEYWORD_PRESETS:
        if any(keyword in text for keyword in keywords):
            rules = PRESETS[preset]
            return {
                'birth': sorted(rules.birth),
                'survival': sorted(rules.survival),
                'explanation': f"{preset.replace('_', ' ').title()} ({rules}) matches the request."
            }

    rules = PRESETS['conway']
    return {
        'birth': sorted(rules.birth),
        'survival': sorted(rules.survival),
        'explanation': f"No specific behaviour recognised; defaulting to Conway's Life ({rules})."
    }
