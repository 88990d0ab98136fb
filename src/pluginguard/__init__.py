"""PluginGuard: rule-based static security scanning for uploaded plugins and repositories."""

__version__ = "0.1.0"
