"""SmartShop: an AI shopping-list chat."""

__version__ = "0.1.0"
