"""Batch importers for Claude Code history files and the claude.ai export."""
