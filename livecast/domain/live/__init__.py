"""
Live streaming domain logic.

Includes:
- session: Live session management and provider lifecycle events.
- recording: Recording state machine and materialization from ended sessions.
- conditional: Version-checked updates with bounded conflict retry.
"""
