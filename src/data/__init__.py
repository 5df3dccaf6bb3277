"""
Ledger record models and their contract argument encoding.

Defines the Order record submitted to the energy trading contract and the
enumerations for its integer status and action codes.
"""
