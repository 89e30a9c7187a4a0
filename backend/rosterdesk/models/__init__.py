from rosterdesk.models.base import Base
from rosterdesk.models.contract import POSITIONS, Contract
from rosterdesk.models.game import Game, GameEvent
from rosterdesk.models.player import Player
from rosterdesk.models.season import Season
from rosterdesk.models.suspension import Suspension, SuspensionAccrual
from rosterdesk.models.team import Team

__all__ = [
    "Base",
    "Contract",
    "Game",
    "GameEvent",
    "POSITIONS",
    "Player",
    "Season",
    "Suspension",
    "SuspensionAccrual",
    "Team",
]
