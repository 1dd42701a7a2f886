"""Domain errors raised by the auction services.

Each error carries a stable ``code`` for clients and the HTTP ``status`` the
API layer should answer with.
"""


class AuctionError(Exception):
    code = 'auction_error'
    status = 400
    message = 'Auction request failed'

    def __init__(self, message=None, **details):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self):
        payload = {'error': self.message, 'code': self.code}
        payload.update(self.details)
        return payload


class AuctionNotFound(AuctionError):
    code = 'auction_not_found'
    status = 404
    message = 'Auction not found'


class NotHost(AuctionError):
    code = 'not_host'
    status = 403
    message = 'Only the host may do that'


class NotParticipant(AuctionError):
    code = 'not_participant'
    status = 403
    message = 'You are not a participant in this auction'


class AlreadyJoined(AuctionError):
    code = 'already_joined'
    status = 409
    message = 'You are already participating in this auction'


class InactiveAuction(AuctionError):
    code = 'inactive_auction'
    status = 409
    message = 'Auction is not active'


class InvalidTransition(AuctionError):
    code = 'invalid_transition'
    status = 409
    message = 'Cannot do that in the current auction state'


class InvalidAmount(AuctionError):
    code = 'invalid_amount'
    status = 400
    message = 'Amount must be a positive whole number'


class BidTooLow(AuctionError):
    code = 'bid_too_low'
    status = 422
    message = 'Bid must exceed the current bid'


class InsufficientBudget(AuctionError):
    code = 'insufficient_budget'
    status = 422
    message = 'Insufficient budget'


class StaleState(AuctionError):
    code = 'stale_state'
    status = 409
    message = 'Auction changed underneath this request; refresh and retry'


class NoLotsSelected(AuctionError):
    code = 'no_lots_selected'
    status = 409
    message = 'No lots selected for auction'


class UnknownLot(AuctionError):
    code = 'unknown_lot'
    status = 400
    message = 'Unknown lot'


class SettlementFailed(AuctionError):
    """A lot's winner could not be charged; needs an operator."""
    code = 'settlement_failed'
    status = 500
    message = 'Winning bid could not be settled'
