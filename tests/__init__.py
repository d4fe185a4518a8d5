"""
Test suite for the Cayley-Dickson algebras

Contains:
- tests/unit/          : Unit tests for construction, indexing, arithmetic,
                         powers, exp/log, rendering, settings and quaternions
"""
