"""
Store Module

Access layer for Cursor's settings database (state.vscdb).

This module provides:
- A get/set/close interface over the embedded key-value table
- SQLite binding for that interface (read-only or read-write)
- Ordered discovery of the database across operating systems
- Header check that a file really is a SQLite database
- Structural read/merge of the custom modes array
"""

__version__ = "0.1.0"
