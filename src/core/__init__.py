"""Core domain package for clipdeck.

Core holds module resolution, module loading and action resolution. File access
and script evaluation come in through the ports in ``core.ports``.
"""
