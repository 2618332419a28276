"""SK Portal: decree request submission and approval service."""

__version__ = "0.1.0"
