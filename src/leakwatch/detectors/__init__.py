"""
Credential family detectors.

Each family has one ``Detector`` subclass; ``DETECTORS`` maps family ids to
classes and ``build_registry`` instantiates them for a scan.
"""
from .base import Detector, DetectorContext, PairingPolicy, SingleKeyDetector
from .registry import DETECTORS, DetectorRegistry, build_registry, detector_for

__all__ = [
    "DETECTORS",
    "Detector",
    "DetectorContext",
    "DetectorRegistry",
    "PairingPolicy",
    "SingleKeyDetector",
    "build_registry",
    "detector_for",
]
