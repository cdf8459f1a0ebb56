import json
import math
from datetime import datetime, timedelta, timezone
from typing import Union

"""
------------------
CLOCK CONFIGS
------------------
"""
DEFAULT_START_DATE = '2020-01-01 00:00:00'

class ClockConfig(object):
    """
    ## Fixed Time-Step Simulation Clock Configuration

    Describes the clock used by the simulation. Time advances in fixed steps of `dt` seconds
    from `start_date` until `end_date` is reached.

    ### Attributes:
        - start_date (`str` or `datetime`): simulation start date
        - end_date (`str` or `datetime`): simulation end date
        - dt (`float`): length of each simulation step in [s]
    """
    def __init__(self,
                start_date : Union[str, datetime],
                end_date : Union[str, datetime],
                dt : Union[float, int] = 1.0,
                **_
                ) -> None:
        """
        Initializes an instance of a clock configuration object

        ### Args:
            - start_date (:obj:`datetime`): simulation start date
            - end_date (:obj:`datetime`): simulation end date
            - dt (`float`): length of each simulation step in [s]
        """
        super().__init__()

        # check types
        if isinstance(start_date, datetime):
            start_date = str(start_date)
        if isinstance(end_date, datetime):
            end_date = str(end_date)

        if not isinstance(start_date , str):
            raise TypeError(f'Attribute `start_date` must be of type `str`. Is of type {type(start_date)}')
        if not isinstance(end_date , str):
            raise TypeError(f'Attribute `end_date` must be of type `str`. Is of type {type(end_date)}')
        if isinstance(dt, bool) or (not isinstance(dt , float) and not isinstance(dt , int)):
            raise TypeError(f'Attribute `dt` must be of type `float` or `int`. Is of type {type(dt)}')
        if dt <= 0:
            raise ValueError(f'Attribute `dt` must be a positive value. Is {dt}')

        # load attributes from arguments
        self.start_date = str(ClockConfig.str_to_datetime(start_date))
        self.end_date = str(ClockConfig.str_to_datetime(end_date))
        self.dt = dt

        if self.get_total_seconds() < 0:
            raise ValueError(f'`end_date` ({self.end_date}) must not be earlier than `start_date` ({self.start_date}).')

    @staticmethod
    def from_duration(duration : Union[float, int], dt : Union[float, int] = 1.0, start_date : str = DEFAULT_START_DATE) -> object:
        """
        Creates a clock configuration lasting `duration` seconds from `start_date`
        """
        if isinstance(duration, bool) or (not isinstance(duration, float) and not isinstance(duration, int)):
            raise TypeError(f'`duration` must be of type `float` or `int`. Is of type {type(duration)}')
        start = ClockConfig.str_to_datetime(str(start_date))
        return ClockConfig(start, start + timedelta(seconds=duration), dt)

    def __eq__(self, other) -> bool:
        """
        Compares two instances of a clock configuration. Returns True if they represent the same configuration
        """
        other : ClockConfig
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        """
        Creates an instance of a dictionary containing information about this object
        """
        return dict(self.__dict__)

    def to_json(self) -> str:
        """
        Creates an instance of a json object containing information about this object
        """
        return json.dumps(self.to_dict())

    def get_start_time(self) -> datetime:
        """
        Returns the start date for this clock
        """
        return ClockConfig.str_to_datetime(self.start_date)

    def get_end_time(self) -> datetime:
        """
        Returns the end date for this clock
        """
        return ClockConfig.str_to_datetime(self.end_date)

    @staticmethod
    def str_to_datetime(date_str : str) -> datetime:
        """
        Reads a string repersenting a date and a time and returns a datetime object
        """
        date, time = date_str.split(' ')
        year, month, day = date.split('-')
        year, month, day = int(year), int(month), int(day)

        if '+' in time:
            time, _ = time.split('+')
        hh, mm, ss = time.split(':')
        hh, mm = int(hh), int(mm)

        # keep fractional seconds down to the microsecond
        ss, _, fraction = ss.partition('.')
        us = int(fraction[:6].ljust(6, '0')) if fraction else 0
        ss = int(ss)

        return datetime(year, month, day, hh, mm, ss, us, tzinfo=timezone.utc)

    def get_total_seconds(self) -> float:
        """
        Returns the simulated period in seconds
        """
        delta : timedelta = self.get_end_time() - self.get_start_time()
        return delta.total_seconds()

    def get_total_steps(self) -> int:
        """
        Returns the number of simulation steps needed to cover the simulated period
        """
        return int(math.ceil(self.get_total_seconds() / self.dt))

    def get_time(self, step : int) -> float:
        """
        Returns the simulation time in [s] at the beginning of step `step`
        """
        return step * self.dt

    def get_progress(self, t : Union[float, int]) -> float:
        """
        Returns the fraction of the simulated period elapsed at time `t`, in [0, 1]
        """
        total = self.get_total_seconds()
        if total <= 0:
            return 1.0
        return min(max(t / total, 0.0), 1.0)
