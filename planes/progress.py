import logging
import threading
from typing import Union

from tqdm import tqdm

from planes.elements import SimulationElement, SimulationElementStatus

class ProgressSlot(object):
    """
    ## Progress Slot

    Single-value hand-off between the simulation thread and the reporting thread. Writes overwrite any unread value
    and reads clear the slot, so only the freshest completion fraction is ever rendered.
    """
    def __init__(self) -> None:
        self.__value = None
        self.__lock = threading.Lock()

    def put(self, fraction : float) -> None:
        with self.__lock:
            self.__value = fraction

    def take(self) -> Union[float, None]:
        with self.__lock:
            value, self.__value = self.__value, None
        return value

class ProgressReporter(SimulationElement):
    """
    ## Simulation Progress Reporter

    Renders the simulation's completion percentage from a separate thread. The simulation reports the fraction of
    simulated time elapsed with `report()`, which never blocks. The reporting thread polls the progress slot and
    renders any new value, idling briefly whenever the slot is empty.

    ### Attributes:
        - poll_period (`float`): time in [s] waited between polls of an empty slot
        - quiet (`bool`): if `True`, progress is never rendered
    """
    def __init__(self,
                poll_period : float = 1.0/24.0,
                quiet : bool = False,
                desc : str = 'Completed',
                level : int = logging.INFO,
                logger : logging.Logger = None
                ) -> None:
        super().__init__('PROGRESS_REPORTER', level, logger)
        if poll_period <= 0:
            raise ValueError(f'`poll_period` must be a positive value. is {poll_period}.')

        self.poll_period = poll_period
        self.quiet = quiet
        self.desc = desc

        self.__slot = ProgressSlot()
        self.__stop = threading.Event()
        self.__thread = None
        self.__pbar = None
        self.last_rendered = None

    def report(self, fraction : float) -> None:
        """
        Hands off the latest completion fraction, overwriting any value not yet rendered
        """
        self.__slot.put(min(max(float(fraction), 0.0), 1.0))

    def start(self) -> None:
        if self.__thread is not None:
            raise RuntimeError('progress reporter can only be started once.')

        self.__thread = threading.Thread(target=self.__run, name=self.name, daemon=True)
        self._status = SimulationElementStatus.RUNNING
        self.__thread.start()

    def stop(self, timeout : float = None) -> None:
        """
        Signals the reporting thread to stop and waits for it to finish
        """
        self.__stop.set()
        if self.__thread is not None:
            self.__thread.join(timeout)
        self._status = SimulationElementStatus.DEACTIVATED

    def is_running(self) -> bool:
        return self.__thread is not None and self.__thread.is_alive()

    def poll(self) -> bool:
        """
        Renders the latest reported value, if any. Returns `True` if a value was rendered
        """
        fraction = self.__slot.take()
        if fraction is None:
            return False

        self.render(fraction)
        return True

    def render(self, fraction : float) -> None:
        self.last_rendered = fraction
        if self.quiet:
            return

        if self.__pbar is None:
            self.__pbar = tqdm(total=100, desc=self.desc, unit='%', bar_format='{desc}: {percentage:6.2f}%|{bar}|')
        self.__pbar.n = fraction * 100
        self.__pbar.refresh()

    def __run(self) -> None:
        try:
            while not self.__stop.is_set():
                if not self.poll():
                    self.__stop.wait(self.poll_period)

            # render whatever was reported last before stopping
            self.poll()

        finally:
            if self.__pbar is not None:
                self.__pbar.close()
                self.__pbar = None
