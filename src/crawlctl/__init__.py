"""Command line entry points: ``crawlctl resolve`` and ``crawlctl crawl``."""
