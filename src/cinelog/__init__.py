"""cinelog - personal movie and series library with Trakt import."""

__version__ = "0.3.0"
