"""
Test support utilities for vds tests.

- ``fake_store``: an in-memory versioned store with branches, three-way
  merges, named locks and fault injection, plus a bounded session pool.
- ``sqlite_store``: SQLite-backed session source and a direct mutation
  runner for exercising the CRUD, ops and front-end layers.
"""
