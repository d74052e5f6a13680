"""ammonomicon: Enter the Gungeon catalog wiki with :wiki-link: cross-references."""

__version__ = "0.4.0"
