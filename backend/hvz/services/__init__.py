"""Game domain services: lifecycle, infection ledger and visibility rules.

This package contains the domain logic imported by HTTP routes and socket
handlers, keeping transport concerns separated from the game rules. Time is
always passed in by the caller.
"""
