from .regex_detector import RegexLinkDetector, build_candidates, detect_links

__all__ = [
    "RegexLinkDetector",
    "build_candidates",
    "detect_links",
]
