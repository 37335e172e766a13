"""AgriDoc: crop disease diagnosis from a photo via a vision-language model."""

__version__ = "0.1.0"
