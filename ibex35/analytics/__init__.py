"""
Derived analytics over the query layer.

Every function takes an Ibex35Queries instance as its first argument and
never talks to the gateway directly.
"""
