"""SPI surface for step payloads."""

from .step_payload import CallDescriptor, Match, MatchOutcome, NoMatch, StepPayload

__all__ = [
    "CallDescriptor",
    "Match",
    "MatchOutcome",
    "NoMatch",
    "StepPayload",
]
