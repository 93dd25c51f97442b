from .base import CandidateProvider, DistanceProvider
from .google import GoogleMapsProvider
from .sample import SampleProvider

__all__ = ["CandidateProvider", "DistanceProvider", "GoogleMapsProvider", "SampleProvider"]
