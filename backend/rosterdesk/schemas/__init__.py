from rosterdesk.schemas.contract import (
    ContractDetailOut,
    ContractOut,
    ContractUpdate,
    ReleaseIn,
    RosterEntryOut,
    SignPlayerIn,
    TransferIn,
)
from rosterdesk.schemas.game import (
    AccrualOut,
    EligibilityOut,
    GameCompletedIn,
    GameEventOut,
    LineupCheckIn,
    PenaltyCreate,
    PenaltyOut,
)
from rosterdesk.schemas.player import PlayerDetailOut, PlayerOut, TimelineEntryOut
from rosterdesk.schemas.suspension import CarriedSuspensionOut, SuspensionCreate, SuspensionOut, SuspensionUpdate
from rosterdesk.schemas.team import SeasonOut, TeamOut

__all__ = [
    "AccrualOut",
    "CarriedSuspensionOut",
    "ContractDetailOut",
    "ContractOut",
    "ContractUpdate",
    "EligibilityOut",
    "GameCompletedIn",
    "GameEventOut",
    "LineupCheckIn",
    "PenaltyCreate",
    "PenaltyOut",
    "PlayerDetailOut",
    "PlayerOut",
    "ReleaseIn",
    "RosterEntryOut",
    "SeasonOut",
    "SignPlayerIn",
    "SuspensionCreate",
    "SuspensionOut",
    "SuspensionUpdate",
    "TeamOut",
    "TimelineEntryOut",
]
