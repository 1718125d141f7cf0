import logging
from typing import Iterable, Optional

from .accumulator import DifferenceAccumulatingHandler
from .criteria import SelectionPolicy, SimpleSelectionPolicy
from .delta import Delta
from .engine import DiffEngine
from .errors import InvalidArgument
from .input_controller import InputController

logger = logging.getLogger(__name__)


class Comparer:
    """
    Loads two builds of a library (jars, class directories or single class
    files) and diffs them into a Delta.
    """

    def __init__(self, previous_path: str, current_path: str,
                 includes: Iterable[str] = (), excludes: Iterable[str] = (),
                 policy: Optional[SelectionPolicy] = None):
        if not previous_path:
            raise InvalidArgument("null previous path")
        if not current_path:
            raise InvalidArgument("null current path")
        self.previous_path = previous_path
        self.current_path = current_path
        self.includes = list(includes)
        self.excludes = list(excludes)
        self.policy = policy or SimpleSelectionPolicy()
        self.loader = InputController()

    def diff(self) -> Delta:
        previous = self.loader.load(self.previous_path)
        current = self.loader.load(self.current_path)

        handler = DifferenceAccumulatingHandler(self.includes, self.excludes)
        DiffEngine(previous, current, self.previous_path, self.current_path).run(handler, self.policy)
        delta = handler.get_delta()
        logger.info("%d differences between %s and %s", len(delta), self.previous_path, self.current_path)
        return delta
