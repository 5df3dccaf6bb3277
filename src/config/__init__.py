"""
Configuration loading and validation for the gateway client.

Provides strongly typed settings objects for channel, contract, identity,
peer connection and per-call timeout configuration, resolved from environment
variables with documented defaults.
"""
