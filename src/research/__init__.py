#!/usr/bin/env python3
"""
Current affairs research engine.

Fetches news from configured sources, detects trending topics, generates
structured UPSC analyses and keeps an auditable record of every run.
"""

__version__ = "1.0.0"
