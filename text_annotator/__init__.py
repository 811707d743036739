from .utils.misc import read_version

__version__ = read_version()
