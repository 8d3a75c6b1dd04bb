"""Error kinds raised by the game services.

Every failure the services report is one of these. The HTTP layer maps
``kind`` to a response; nothing here is retried or swallowed.
"""


class HvzError(Exception):
    kind = 'HvzError'

    def __init__(self, message: str = ''):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class InvalidGameConfiguration(HvzError):
    kind = 'InvalidGameConfiguration'


class IllegalPhaseTransition(HvzError):
    kind = 'IllegalPhaseTransition'


class NoPlayersRegistered(HvzError):
    kind = 'NoPlayersRegistered'


class GameNotInWindow(HvzError):
    kind = 'GameNotInWindow'


class GameNotActive(HvzError):
    kind = 'GameNotActive'


class DuplicateRegistration(HvzError):
    kind = 'DuplicateRegistration'


class InvalidBiteCode(HvzError):
    kind = 'InvalidBiteCode'


class NotFound(HvzError):
    kind = 'NotFound'


class PlayerNotFound(NotFound):
    kind = 'PlayerNotFound'


class GameNotFound(NotFound):
    kind = 'GameNotFound'


class PoiNotFound(NotFound):
    kind = 'PoiNotFound'


class MapNotFound(NotFound):
    kind = 'MapNotFound'


class SquadNotFound(NotFound):
    kind = 'SquadNotFound'


class InvalidPointOfInterest(HvzError):
    kind = 'InvalidPointOfInterest'
