"""varsave — persist dirty registry variables to a configuration file on demand."""

__version__ = "0.1.0"
