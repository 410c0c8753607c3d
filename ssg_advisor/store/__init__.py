"""
Knowledge graph store: the keyed storage contract consumed by the advisor.

Modules
-------
base         : KnowledgeGraphStore ABC: the contract every backend honours.
locks        : KeyedLockRegistry: per-key critical sections, evicted when idle.
memory       : InMemoryKnowledgeGraphStore: dict-backed, for tests.
sqlite_store : SQLiteKnowledgeGraphStore: durable, one connection per call.
"""
