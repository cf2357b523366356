"""Engagement-based ranking for encyclopedia terms."""

__version__ = "0.1.0"
