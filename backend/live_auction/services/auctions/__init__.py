"""Auction domain services: bidding, consensus, timers and settlement.

This package holds the lot lifecycle and budget logic that HTTP routes and
socket handlers call into. Every mutation is committed through the
compare-and-set helpers in ``store`` so concurrent clients can race on the
same lot without double-applying its resolution.
"""
