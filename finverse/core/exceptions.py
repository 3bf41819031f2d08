class GameRuleError(ValueError):
    """A request the game rules refuse. The game state is left untouched."""


class ContributionRejected(GameRuleError):
    pass


class InvalidProfile(GameRuleError):
    pass


class InvalidTransition(GameRuleError):
    pass


class LedgerInvariantError(RuntimeError):
    """Raised when a portfolio balance would go negative. Indicates a bug."""
