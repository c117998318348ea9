"""
Exception taxonomy for the Kuhn Poker engine.

    InvalidStateError    - an action or operation that the current hand state
                           does not allow (illegal action, already terminal).
    InvalidProfileError  - a strategy profile with a missing or out-of-range
                           probability, or an unclassifiable decision point.
    InvalidArgumentError - a bad argument to a driver such as the simulator
                           (non-positive hand count, unknown profile id).

All three are contract violations raised straight to the direct caller;
nothing in the engine catches or corrects them.
"""

from __future__ import annotations


class KuhnPokerError(Exception):
    """Base class for every error raised by the kuhn_poker package."""


class InvalidStateError(KuhnPokerError, RuntimeError):
    """Raised when an action is applied to a hand that cannot accept it."""


class InvalidProfileError(KuhnPokerError, ValueError):
    """Raised when a strategy profile violates the 12-probability contract."""


class InvalidArgumentError(KuhnPokerError, ValueError):
    """Raised when a driver is invoked with an unusable argument."""
