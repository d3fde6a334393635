"""MdShelf — password-gated markdown shelf with view history, folders and retention."""

__version__ = "0.3.0"
