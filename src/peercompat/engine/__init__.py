"""Concurrent compatibility-resolution engine."""

from peercompat.engine.aggregator import ResultAggregator
from peercompat.engine.checker import PackageChecker
from peercompat.engine.classifier import HeuristicClassifier, classify_formal, find_peer_range
from peercompat.engine.pool import WorkerPool
from peercompat.engine.progress import (
    ProgressObserver,
    ProgressPublisher,
    ProgressTracker,
    RichProgressObserver,
)
from peercompat.engine.recommendation import distance_for, recommend
from peercompat.engine.scanner import VersionScanner, prepare_versions

__all__ = [
    "HeuristicClassifier",
    "PackageChecker",
    "ProgressObserver",
    "ProgressPublisher",
    "ProgressTracker",
    "ResultAggregator",
    "RichProgressObserver",
    "VersionScanner",
    "WorkerPool",
    "classify_formal",
    "distance_for",
    "find_peer_range",
    "prepare_versions",
    "recommend",
]
