"""Auction status variant and the command transition table."""

import enum

from .errors import InactiveAuction, InvalidTransition


class AuctionStatus(str, enum.Enum):
    PENDING = 'pending'
    ACTIVE = 'active'
    PAUSED = 'paused'
    COMPLETED = 'completed'


class Command(str, enum.Enum):
    START = 'start'
    PAUSE = 'pause'
    RESUME = 'resume'
    SKIP = 'skip'
    END = 'end'
    BID = 'bid'
    PASS = 'pass'
    RESOLVE = 'resolve'


# Commands issued by participants rather than the host
PARTICIPANT_COMMANDS = frozenset({Command.BID, Command.PASS, Command.RESOLVE})

_TRANSITIONS = {
    (AuctionStatus.PENDING, Command.START): AuctionStatus.ACTIVE,
    (AuctionStatus.PENDING, Command.END): AuctionStatus.COMPLETED,
    (AuctionStatus.ACTIVE, Command.PAUSE): AuctionStatus.PAUSED,
    (AuctionStatus.ACTIVE, Command.SKIP): AuctionStatus.ACTIVE,
    (AuctionStatus.ACTIVE, Command.END): AuctionStatus.COMPLETED,
    (AuctionStatus.ACTIVE, Command.BID): AuctionStatus.ACTIVE,
    (AuctionStatus.ACTIVE, Command.PASS): AuctionStatus.ACTIVE,
    (AuctionStatus.ACTIVE, Command.RESOLVE): AuctionStatus.ACTIVE,
    (AuctionStatus.PAUSED, Command.RESUME): AuctionStatus.ACTIVE,
    (AuctionStatus.PAUSED, Command.END): AuctionStatus.COMPLETED,
    (AuctionStatus.COMPLETED, Command.START): AuctionStatus.ACTIVE,
    (AuctionStatus.COMPLETED, Command.END): AuctionStatus.COMPLETED,
}


def next_status(status, command):
    """Return the status ``command`` leads to from ``status``.

    Raises InactiveAuction for participant commands and InvalidTransition
    for host commands that the current status does not allow.
    """
    status = AuctionStatus(status)
    command = Command(command)
    try:
        return _TRANSITIONS[(status, command)]
    except KeyError:
        if command in PARTICIPANT_COMMANDS:
            raise InactiveAuction() from None
        raise InvalidTransition(
            f'Cannot {command.value} an auction that is {status.value}',
            auction_status=status.value,
        ) from None
