"""
Signals sent by the vote ledger. Only ever sent after the vote transaction commits.
"""

from django.dispatch import Signal

# Sent with ``vote`` (Vote) and ``result`` (VoteResult)
vote_cast = Signal()
