"""Match faces in a group photo against labeled reference images."""

__version__ = "1.0.0"
