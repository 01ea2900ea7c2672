"""Game domain services: guess matching, scoring, timers and session state.

This package contains the buzzer-quiz rules and must stay free of
Socket.IO imports; socket handlers call into it and hand it a broadcaster,
keeping transport concerns separated from core game mechanics.
"""
