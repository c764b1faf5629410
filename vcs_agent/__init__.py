"""VCS scan agent - incremental build, publish and scan of git history."""

__version__ = "0.1.0"
