"""nextmig: Next.js 14/15 → 16 migration toolkit."""

__version__ = "1.0.0"
