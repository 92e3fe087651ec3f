"""State/store layer.

This package owns the in-memory city list and is the only place visited
state is changed. Readers get immutable snapshots and subscribe to events.
"""
