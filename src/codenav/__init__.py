"""codenav - call graph and code fact navigation over a per-project document store."""

__version__ = "0.1.0"
