"""
Docmate core package.

The `reading` subpackage turns ingested documents into a stable sequence of
pages and keeps the reader's position across content changes. The
`enrichment` subpackage resolves ranked provider chains for translation,
search, analysis, and dictionary lookups, with per-provider rate limiting and
graceful degradation when every remote provider fails.
"""
