"""medextract: health parameter extraction from medical lab reports."""

__version__ = "0.1.0"
