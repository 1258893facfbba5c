from importlib.metadata import PackageNotFoundError, version

try:
    _version = version("bufkit")
except PackageNotFoundError as e:
    raise PackageNotFoundError(
        "bufkit is not installed; please install it in your Python environment."
    ) from e
