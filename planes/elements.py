import logging
from abc import ABC
from enum import Enum

class SimulationElementStatus(Enum):
    INIT = 'INITIALIZED'
    ACTIVATED = 'ACTIVATED'
    RUNNING = 'RUNNING'
    DEACTIVATED = 'DEACTIVATED'

class SimulationElement(ABC):
    """
    ## Abstract Simulation Element

    Base class for all simulation elements. This includes the simulation itself, allocation strategies and progress reporters.

    ### Attributes:
        - name (`str`): name of this simulation element
        - _status (`Enum`) : Status of the element within the simulation
        - _logger (`Logger`): debug logger
    """
    def __init__(   self,
                    element_name : str,
                    level : int = logging.INFO,
                    logger : logging.Logger = None) -> None:
        """
        Initiates a new simulation element

        ### Args:
            - element_name (`str`): The element's name
            - level (`int`): logging level for this simulation element. Level set to INFO by defauly
            - logger (`logging.Logger`) : logger for this simulation element. If none is given, a new one will be generated
        """
        super().__init__()

        # check for attribute types
        if not isinstance(element_name, str):
            raise AttributeError(f'`element_name` must be of type `str`. is of type {type(element_name)}')
        if not isinstance(level, int):
            raise AttributeError(f'`level` must be of type `int`. is of type {type(level)}')
        if logger is not None and not isinstance(logger, logging.Logger):
            raise AttributeError(f'`logger` must be of type `logging.Logger`. is of type {type(logger)}')

        # initialize attributes with parameters
        self.name = element_name
        self._status = SimulationElementStatus.INIT
        self._logger : logging.Logger = self.__set_up_logger(level) if logger is None else logger

    def get_element_name(self) -> str:
        """
        Returns the name this simulation element
        """
        return self.name

    def get_logger(self) -> logging.Logger:
        """
        Returns this object's internal logger
        """
        return self._logger

    def get_status(self) -> SimulationElementStatus:
        return self._status

    def __set_up_logger(self, level=logging.DEBUG) -> logging.Logger:
        """
        Sets up a logger for this simulation element
        """
        logger = logging.getLogger('planes')
        logger.propagate = False
        logger.setLevel(level)

        if not logger.handlers:
            c_handler = logging.StreamHandler()
            c_handler.setLevel(logging.DEBUG)
            logger.addHandler(c_handler)

        return logger

    def _log(self, msg : str, level=logging.DEBUG) -> None:
        """
        Logs a message to the desired level.
        """
        if level is logging.DEBUG:
            self._logger.debug(f'{self.name}: {msg}')
        elif level is logging.INFO:
            self._logger.info(f'{self.name}: {msg}')
        elif level is logging.WARNING:
            self._logger.warning(f'{self.name}: {msg}')
        elif level is logging.ERROR:
            self._logger.error(f'{self.name}: {msg}')
        elif level is logging.CRITICAL:
            self._logger.critical(f'{self.name}: {msg}')
