"""
trackscan - analytics event detection for JavaScript and TypeScript

Statically finds tracking calls (Segment, Mixpanel, Amplitude, PostHog,
gtag, GTM dataLayer, Datadog RUM and more) in a source tree and emits the
events they send, with properties and call sites, as YAML or JSON.
"""

__version__ = "0.1.0"

from .api import AnalysisResult, analyze_directory, run
from .models import CallSite, DetectedEvent, Implementation, PropertySchema, RepoDetails

__all__ = [
    "analyze_directory",  # Main entry point
    "run",
    "AnalysisResult",
    "CallSite",
    "DetectedEvent",
    "Implementation",
    "PropertySchema",
    "RepoDetails",
]
