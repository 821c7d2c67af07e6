"""gitpush - run git operations from short natural-language phrases."""

__version__ = "0.1.0"
