"""peercompat - check npm dependencies against a target framework major version."""

__version__ = "0.3.0"
