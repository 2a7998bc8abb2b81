from enum import Enum


class MatchResult(str, Enum):
    WIN = "WIN"  # Attacking side won
    LOSS = "LOSS"


class Side(str, Enum):
    ATTACKER = "attacker"
    DEFENDER = "defender"
