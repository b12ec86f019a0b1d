"""binroute: nearest-neighbour collection routes for waste bins."""

__version__ = "1.0.0"
