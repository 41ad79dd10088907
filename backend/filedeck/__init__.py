"""FileDeck — file manager backend with cached image previews."""

__version__ = "0.3.0"
