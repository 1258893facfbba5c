import os
from typing import TypeVar

PathLike = TypeVar("PathLike", str, bytes, os.PathLike)
