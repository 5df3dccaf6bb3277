"""
Generic utility functions shared across modules.

Includes the clock and deadline abstractions and logging setup.
"""
