"""Exceptions raised by the notifier."""


class NotifierError(Exception):
    """Base exception for notifier errors."""
    pass


class TransportError(NotifierError):
    """Request could not be sent or the upstream answered with an error."""
    pass


class DecodeError(NotifierError):
    """Response body could not be decoded into the expected shape."""
    pass


class ProtocolError(NotifierError):
    """Upstream response is well-formed but makes no progress."""
    pass


class ThresholdParseError(NotifierError):
    """A list item comment is not a numeric price threshold."""
    pass


class ParseError(NotifierError):
    """A scraped listing field could not be parsed."""
    pass


class NotificationDeliveryError(NotifierError):
    """A new-listing notification could not be delivered."""
    pass


class FatalCycleError(NotifierError):
    """The watch-lists could not be fetched; the poll loop cannot continue."""
    pass
