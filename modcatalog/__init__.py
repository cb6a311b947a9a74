"""Mod catalogue: tag and text filtering with shareable URL state."""
