"""Icebreaker proximity matching core."""
