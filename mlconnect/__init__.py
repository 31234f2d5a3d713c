"""Input and output connectors and evaluation measures for machine learning back ends."""

__version__ = "0.1.0"

__all__ = [
    "fileops",
    "httpclient",
    "inputconn",
    "outputconn",
    "imginput",
    "txtinput",
]