class CYKError(ValueError):
    """Base class for every grammar or query error raised by the CYK core."""


# ---------------------------------------------------------------------- #
# Grammar store
# ---------------------------------------------------------------------- #


class InvalidSymbol(CYKError):
    """Symbol has the wrong letter case (or is not a single letter)."""


class DuplicateSymbol(CYKError):
    """Symbol is already registered."""


class UnknownSymbol(CYKError):
    """Referenced non-terminal is not registered."""


class InvalidProduction(CYKError):
    """Right-hand side is not A -> BC or A -> a."""


class DuplicateProduction(CYKError):
    """Identical right-hand side already stored for the head."""


# ---------------------------------------------------------------------- #
# Chart engine
# ---------------------------------------------------------------------- #


class EmptyInput(CYKError):
    pass


class IncompleteGrammar(CYKError):
    pass


class UnknownTerminal(CYKError):
    pass


class InvalidWord(CYKError):
    pass
