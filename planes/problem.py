import json
import os
from typing import Union

from planes.clocks import DEFAULT_START_DATE, ClockConfig

class Problem(object):
    """
    ## Problem Definition

    Describes the planes, operators and tasks of a simulation scenario.

    ### Attributes:
        - duration (`float`): simulated period in [s]
        - start_date (`str`): simulation start date
        - planes (`list`): dictionaries describing every plane (`name`, `pos`, `speed`)
        - operators (`list`): dictionaries describing every operator (`name`, `pos`, `comms_range`)
        - tasks (`list`): dictionaries describing every task (`id`, `pos`, `t_creation`)
    """
    def __init__(self,
                duration : Union[float, int],
                planes : list,
                tasks : list = None,
                operators : list = None,
                start_date : str = DEFAULT_START_DATE,
                **_
                ) -> None:
        if isinstance(duration, bool) or (not isinstance(duration, float) and not isinstance(duration, int)):
            raise TypeError(f'`duration` must be of type `float` or `int`. is of type {type(duration)}.')
        if duration <= 0:
            raise ValueError(f'`duration` must be a positive value. is {duration}.')
        if not isinstance(planes, list):
            raise TypeError(f'`planes` must be of type `list`. is of type {type(planes)}.')
        if len(planes) == 0:
            raise ValueError('problem must contain at least one plane.')

        tasks = tasks if tasks is not None else []
        operators = operators if operators is not None else []
        for name, entries, required in [('planes', planes, ['pos']),
                                        ('tasks', tasks, ['pos']),
                                        ('operators', operators, ['pos', 'comms_range'])]:
            if not isinstance(entries, list):
                raise TypeError(f'`{name}` must be of type `list`. is of type {type(entries)}.')
            for i, entry in enumerate(entries):
                if not isinstance(entry, dict):
                    raise TypeError(f'`{name}[{i}]` must be of type `dict`. is of type {type(entry)}.')
                for key in required:
                    if key not in entry:
                        raise ValueError(f'`{name}[{i}]` is missing required attribute `{key}`.')

        self.duration = duration
        self.start_date = str(start_date)
        self.planes = [dict(plane) for plane in planes]
        self.operators = [dict(operator) for operator in operators]
        self.tasks = [dict(task) for task in tasks]

        for i, plane in enumerate(self.planes):
            plane.setdefault('name', f'PLANE_{i}')
        for i, operator in enumerate(self.operators):
            operator.setdefault('name', f'OPERATOR_{i}')
        for i, task in enumerate(self.tasks):
            task.setdefault('id', f'TASK_{i}')
            task.setdefault('t_creation', 0.0)

    @staticmethod
    def from_dict(problem_dict : dict) -> object:
        return Problem(**problem_dict)

    @staticmethod
    def from_json(path : str) -> object:
        """
        Loads a problem definition from a JSON file
        """
        if not os.path.isfile(path):
            raise FileNotFoundError(f'problem file `{path}` not found.')

        with open(path, 'r') as problem_file:
            problem_dict = json.load(problem_file)

        if not isinstance(problem_dict, dict):
            raise TypeError(f'problem file `{path}` must contain a JSON object.')
        return Problem.from_dict(problem_dict)

    def get_clock_config(self, dt : Union[float, int] = 1.0) -> ClockConfig:
        return ClockConfig.from_duration(self.duration, dt, self.start_date)

    def to_dict(self) -> dict:
        return dict(self.__dict__)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
