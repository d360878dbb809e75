"""Batch and growth-sample records: value types, input checks, storage.

- models.py: Batch / Sample frozen dataclasses and dict conversion
- validation.py: form-level rules applied at the HTTP surface
- store.py: thread-safe in-memory store with JSON snapshot persistence
"""
