"""Shared utilities for peercompat."""
