import random
from typing import Optional

# Face value -> drinking rule
DICE_RULES = {
    1: 'Everyone drinks',
    2: 'Player drinks',
    3: 'Give 2 drinks',
    4: 'Categories',
    5: 'Never have I ever',
    6: 'Rule maker',
}


def roll(rng: Optional[random.Random] = None) -> dict:
    """Roll one six-sided die and look up its rule."""
    value = (rng or random).randint(1, 6)
    return {'value': value, 'rule': DICE_RULES[value]}
