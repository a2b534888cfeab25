"""Render DependencyGraph results for visual inspection."""
