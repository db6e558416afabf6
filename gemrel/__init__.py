"""gemrel - interactive gem release pipeline."""

__version__ = "0.1.0"
