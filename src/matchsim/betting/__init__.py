"""Wager ledger: placement, multiplier tokens, settlement."""
