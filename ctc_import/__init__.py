from .config import Config, load_config, save_config
from .importer import import_puzzle
from .version import __version__

__all__ = ["Config", "import_puzzle", "load_config", "save_config", "__version__"]
