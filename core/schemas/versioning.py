"""
Schemas & Canonicalization
File: versioning.py

Purpose: Centralize schema version constants.
No imports from other schema files to avoid circular dependencies.
"""

# Version stamped into every pinned transcript bundle
TRANSCRIPT_SCHEMA_VERSION: str = "1.0.0"
