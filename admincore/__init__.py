"""Building blocks for admin back ends: storage adapters, tenant scoping, runnables, tools and call logging."""

__version__ = "0.1.0"