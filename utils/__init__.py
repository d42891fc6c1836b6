"""
Utilities: logging helpers, continuation functors and instance loaders.

Loaders are imported from their modules (utils.tsplib_loader,
utils.orlib_loader) so that importing the helpers stays cheap.
"""
