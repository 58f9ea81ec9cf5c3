import importlib.metadata

try:
    VERSION = importlib.metadata.version("tlm2api")
except importlib.metadata.PackageNotFoundError:
    # Not installed, e.g. running from a source checkout.
    VERSION = "0.0.0-dev"
