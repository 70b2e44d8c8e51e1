# src/errors.py

"""Exception hierarchy shared by the tracker components."""


class PriceTrackerError(Exception):
    """Base class for all price_tracker errors."""


class ConfigError(PriceTrackerError):
    """Watchlist or history file is missing or malformed."""


class HistoryWriteError(PriceTrackerError):
    """The history file could not be persisted."""


class TransportError(PriceTrackerError):
    """A notification could not be delivered."""


class CheckError(PriceTrackerError):
    """A single item check failed; never aborts the run."""

    reason: str = "CheckError"


class NavigationTimeout(CheckError):
    """The page did not load within the navigation deadline."""

    reason = "NavigationTimeout"


class NavigationError(CheckError):
    """The page failed to load for a reason other than a timeout."""

    reason = "NavigationError"


class SelectorTimeout(CheckError):
    """The price selector did not appear within its deadline."""

    reason = "SelectorTimeout"


class ParseError(CheckError):
    """No price pattern was found in the extracted text."""

    reason = "ParseError"
