__all__ = ["__version__"]

# Derive the package version from installed distribution metadata when
# available. When running from a bare source checkout or from a zip archive
# dropped on the search path, fall back to a local dev version string.
try:
	from importlib.metadata import version, PackageNotFoundError
	try:
		__version__ = version("multiloader")
	except PackageNotFoundError:
		__version__ = "0.0.0+local"
except ImportError:
	__version__ = "0.0.0+local"
