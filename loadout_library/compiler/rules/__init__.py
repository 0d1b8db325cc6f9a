"""Fragment generators grouped by catalog category.

RULE_SETS fixes the declaration order of the whole registry: categories in
the order listed here, rules within a category in definition order.
"""

from . import audio
from . import network
from . import performance
from . import power
from . import privacy
from . import system
from .base import FragmentGenerator
from .base import Rule
from .base import RuleSet

RULE_SETS: tuple[RuleSet, ...] = (
    system.RULES,
    performance.RULES,
    power.RULES,
    network.RULES,
    privacy.RULES,
    audio.RULES,
)

__all__ = ["RULE_SETS", "FragmentGenerator", "Rule", "RuleSet"]
