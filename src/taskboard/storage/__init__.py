"""
Persistence.

- local_store.py: SQLite key/value store (JSON blobs)
- remote_store.py: Firestore document collections
- sync_store.py: local-first store with optional remote sync
"""
