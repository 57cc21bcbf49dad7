"""Community-flavored Magic 8-Ball oracle."""

__version__ = "1.0.0"
