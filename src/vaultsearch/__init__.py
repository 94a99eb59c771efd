"""vaultsearch: content, fuzzy and link-graph search over a markdown vault."""

__version__ = "0.1.0"
