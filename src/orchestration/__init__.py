"""
Multi-step workflow pipelines and orchestration logic.

Coordinates the register-then-read order run: transport, credentials and
gateway session setup, the contract calls, and guaranteed cleanup.
"""
