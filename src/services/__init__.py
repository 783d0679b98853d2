"""Business logic services.

Import from the submodules directly, e.g.
    from src.services.recalculation import get_coordinator
"""
