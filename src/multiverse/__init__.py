"""
Multiverse Module
Toroidal life-like automata with time-travel history, forking and Pattern DNA
"""

from .errors import (
    MultiverseError,
    OutOfRange,
    InvalidRule,
    MalformedRuleProposal,
    NotFound,
    ActiveUniverseError,
    CodecError
)
from .grid import Grid, neighbor_count
from .rules import RuleSet, CONWAY, PRESETS, get_preset, parse_rule
from .engine import step, TransitionEngine
from .history import HistoryLedger
from .universe import Universe, UniverseState
from .registry import MultiverseRegistry
from .analyzer import (
    PatternClass,
    PatternDNA,
    AnalysisSettings,
    symmetry,
    stability,
    entropy,
    classify,
    analyze,
    sonification_metrics
)
from .codec import encode, decode
from .advisor import validate_proposal, request_rule, keyword_advisor

__all__ = [
    'MultiverseError',
    'OutOfRange',
    'InvalidRule',
    'MalformedRuleProposal',
    'NotFound',
    'ActiveUniverseError',
    'CodecError',
    'Grid',
    'neighbor_count',
    'RuleSet',
    'CONWAY',
    'PRESETS',
    'get_preset',
    'parse_rule',
    'step',
    'TransitionEngine',
    'HistoryLedger',
    'Universe',
    'UniverseState',
    'MultiverseRegistry',
    'PatternClass',
    'PatternDNA',
    'AnalysisSettings',
    'symmetry',
    'stability',
    'entropy',
    'classify',
    'analyze',
    'sonification_metrics',
    'encode',
    'decode',
    'validate_proposal',
    'request_rule',
    'keyword_advisor'
]
