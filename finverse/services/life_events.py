import logging
from typing import List, Optional

from finverse.models.game import LifeEvent
from finverse.services.return_model import RandomSource

logger = logging.getLogger(__name__)

# Chance that any event is rolled at all in a given month
EVENT_GATE_PROBABILITY = 0.3

# Weights sum to 0.84: a roll that lands above the cumulative sum is "no event"
# even though the gate passed. Both stages are kept as-is.
LIFE_EVENTS: List[LifeEvent] = [
    LifeEvent(name="Job Loss", impact=-150000, probability=0.05),
    LifeEvent(name="IPO Win", impact=200000, probability=0.08),
    LifeEvent(name="Medical Emergency", impact=-80000, probability=0.1),
    LifeEvent(name="Inheritance", impact=300000, probability=0.06),
    LifeEvent(name="Market Dip", impact=-50000, probability=0.12),
    LifeEvent(name="Promotion", impact=50000, probability=0.15),
    LifeEvent(name="Salary Hike", impact=30000, probability=0.2),
    LifeEvent(name="Tax Penalty", impact=-20000, probability=0.08),
]


def roll_life_event(rng: RandomSource, events: List[LifeEvent] = LIFE_EVENTS) -> Optional[LifeEvent]:
    """
    Picks one event by cumulative weight, or None when the draw exceeds
    the summed weights.
    """
    draw = float(rng.random())
    cumulative = 0.0
    for event in events:
        cumulative += event.probability
        if draw <= cumulative:
            return event.model_copy()
    return None


def maybe_roll_life_event(rng: RandomSource) -> Optional[LifeEvent]:
    if float(rng.random()) >= EVENT_GATE_PROBABILITY:
        return None
    event = roll_life_event(rng)
    if event is None:
        logger.debug("Life event gate passed but no event selected")
    return event
