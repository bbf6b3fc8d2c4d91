"""trackenhancer - YouTube and Discogs enrichment for radio show track lists."""

__version__ = "0.1.0"
