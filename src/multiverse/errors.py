"""
Error Taxonomy
Exceptions raised by the multiverse engine
"""


class MultiverseError(Exception):
    """Base class for every recoverable engine error."""


class OutOfRange(MultiverseError, IndexError):
    """Generation is outside the retained history window."""

    def __init__(self, generation: int, oldest: int, newest: int):
        self.generation = generation
        self.oldest = oldest
        self.newest = newest
        super().__init__(
            f"Generation {generation} not retrievable "
            f"(retained window: {oldest}..{newest})"
        )


class InvalidRule(MultiverseError, ValueError):
    """Rule value outside [0, 8] or structurally malformed rule."""


class MalformedRuleProposal(InvalidRule):
    """Rule Advisor response failed validation."""


class NotFound(MultiverseError, KeyError):
    """Unknown universe id (or unknown named pattern)."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class ActiveUniverseError(MultiverseError):
    """Removing the active universe without a fallback to promote."""


class CodecError(MultiverseError, ValueError):
    """Encoded universe string could not be decoded."""
