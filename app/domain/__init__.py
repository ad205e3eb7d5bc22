"""Pure lease billing rules: calendar arithmetic, bill generation and overrides.

Nothing in this package touches the database, the clock or the network.
"""
