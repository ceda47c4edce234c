"""Core interfaces.

Why:
- Protocols define the contracts that concrete adapters implement.
- Dependencies point inwards: the Core depends on abstractions only.
"""
