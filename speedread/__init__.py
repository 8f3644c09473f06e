"""Terminal and local-web RSVP speed reader for EPUB, PDF and text documents."""

__version__ = "0.1.0"
