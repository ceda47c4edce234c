"""Domain models and entities.

Why:
- Pure, strict data structures (Pydantic v2) and the tree nodes live here.
- The domain knows nothing about subprocesses, the CLI or Rich.
"""
