"""signspider: SpreadTheSign dictionary crawler."""

__version__ = "0.1.0"
