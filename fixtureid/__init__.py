"""fixtureid - stable fixture identities across store re-exports."""

__version__ = "0.1.0"
