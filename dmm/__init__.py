# dmm interpreter
# "hallo ... reicht dann auch mal"
__version__ = "0.1.0"

from .runtime import Interpreter, DmmError, FatigueAbort
from .types import DmmValue, DmmType
from .worker import Worker, Mood
from .shouter import Shouter
