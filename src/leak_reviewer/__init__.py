"""Pull request reviewer that scans diffs for leaked secrets."""

__version__ = "0.1.0"
