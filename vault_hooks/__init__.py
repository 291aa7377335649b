"""Hook entry points invoked by Claude Code."""
