"""Chat bot that replaces links to social media posts with rich embeds."""

__version__ = "0.3.0"
