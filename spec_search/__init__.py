"""spec-search: query language and relevance-ranked search for spec documents."""

__version__ = "0.1.0"
