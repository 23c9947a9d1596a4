"""GameGauge — scoreboards for game nights.

Users register, log in with a bearer token, and keep score tables
("boards") of participants and per-round scores. Every board belongs
to exactly one user and is only reachable through its owner.
"""

__version__ = "0.1.0"
