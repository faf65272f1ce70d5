"""Wrappers around external programs: shells, mounts, trash, editor, plugins."""
