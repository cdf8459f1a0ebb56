from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Union
import numpy as np

from planes.states import PlaneState
from planes.tasks import Task

def distance_cost(plane : object, task : Task) -> float:
    """
    Default cost function: euclidean distance between the plane's current position and the task
    """
    plane : Plane
    return plane.state.distance_to(task.pos)

class Operator(object):
    """
    ## Operator

    Ground station overseeing the planes. Planes within its communication range can report back to it.

    ### Attributes:
        - name (`str`): name of the operator
        - pos (`list`): cartesian coordinates of the operator
        - comms_range (`float`): communication range of the operator
    """
    def __init__(self, pos : list, comms_range : Union[float, int], name : str = 'OPERATOR', **_) -> None:
        if not isinstance(pos, list) and not isinstance(pos, tuple):
            raise AttributeError(f'`pos` must be of type `list`. is of type {type(pos)}.')
        elif len(pos) != 2:
            raise ValueError(f'`pos` must be a list of 2 values. is of length {len(pos)}.')
        if isinstance(comms_range, bool) or (not isinstance(comms_range, float) and not isinstance(comms_range, int)):
            raise AttributeError(f'`comms_range` must be of type `float` or `int`. is of type {type(comms_range)}.')
        if comms_range < 0:
            raise ValueError(f'`comms_range` must be a non-negative value. is {comms_range}.')

        self.name = name
        self.pos = [float(x) for x in pos]
        self.comms_range = comms_range

    def distance_to(self, pos : list) -> float:
        return float(np.sqrt( (pos[0]-self.pos[0])**2 + (pos[1]-self.pos[1])**2 ))

    def __repr__(self) -> str:
        return f'Operator({self.name})'

    def to_dict(self) -> dict:
        return {'name' : self.name, 'pos' : list(self.pos), 'comms_range' : self.comms_range}

"""
------------------
IDLE STRATEGIES
------------------
"""
class IdleStrategies(Enum):
    NOTHING = 'nothing'         # idle planes stay where they are
    OPERATOR = 'operator'       # idle planes fly back into range of their nearest operator

class IdleStrategy(ABC):
    """
    Decides what a plane does during a simulation step in which it holds no task
    """
    @abstractmethod
    def idle_action(self, plane : object, operators : list, dt : Union[float, int]) -> bool:
        """
        Performs the idle action of `plane` for `dt` seconds.

        Returns `True` if the plane moved
        """

class DoNothing(IdleStrategy):
    def idle_action(self, plane : object, operators : list, dt : Union[float, int]) -> bool:
        plane : Plane
        plane.state.hold(dt)
        return False

class FlyTowardsOperator(IdleStrategy):
    """
    Planes using this strategy head back to the nearest operator as soon as they become idle,
    stopping once they are within its communication range.
    """
    def idle_action(self, plane : object, operators : list, dt : Union[float, int]) -> bool:
        plane : Plane
        if not operators:
            plane.state.hold(dt)
            return False

        operator : Operator = min(operators, key=lambda o : o.distance_to(plane.state.pos))
        if operator.distance_to(plane.state.pos) >= operator.comms_range:
            plane.state.move_towards(operator.pos, dt, PlaneState.IDLING)
            return True

        plane.state.hold(dt)
        return False

def idle_strategy_from_name(name : str) -> IdleStrategy:
    if name == IdleStrategies.NOTHING.value:
        return DoNothing()
    elif name == IdleStrategies.OPERATOR.value:
        return FlyTowardsOperator()
    else:
        raise NotImplementedError(f'idle strategy `{name}` not yet supported.')

"""
------------------
PLANES
------------------
"""
class Plane(object):
    """
    ## Plane

    Mobile agent serving tasks in the simulation.

    ### Attributes:
        - name (`str`): name of the plane
        - state (:obj:`PlaneState`): kinematic state of the plane
        - visibility_range (`float`): maximum distance at which the plane can see a task
        - cost_function (`callable`): cost of serving a given task, `cost_function(plane, task) -> float`
        - idle_strategy (:obj:`IdleStrategy`): behaviour of the plane while it holds no task
        - completed (`list`): tasks completed by this plane
    """
    def __init__(self,
                name : str,
                pos : list,
                speed : Union[float, int] = 1.0,
                visibility_range : Union[float, int] = np.inf,
                cost_function : Callable = distance_cost,
                idle_strategy : IdleStrategy = None,
                t : Union[float, int] = 0,
                **_
                ) -> None:
        if not isinstance(name, str):
            raise AttributeError(f'`name` must be of type `str`. is of type {type(name)}.')
        if not isinstance(pos, list) and not isinstance(pos, tuple):
            raise AttributeError(f'`pos` must be of type `list`. is of type {type(pos)}.')
        elif len(pos) != 2:
            raise ValueError(f'`pos` must be a list of 2 values. is of length {len(pos)}.')
        if isinstance(visibility_range, bool) or (not isinstance(visibility_range, float) and not isinstance(visibility_range, int)):
            raise AttributeError(f'`visibility_range` must be of type `float` or `int`. is of type {type(visibility_range)}.')
        if visibility_range <= 0:
            raise ValueError(f'`visibility_range` must be a positive value. is {visibility_range}.')
        if not callable(cost_function):
            raise AttributeError(f'`cost_function` must be callable. is of type {type(cost_function)}.')

        self.name = name
        self.state = PlaneState(pos, speed, t=t)
        self.visibility_range = visibility_range
        self.cost_function = cost_function
        self.idle_strategy = idle_strategy if idle_strategy is not None else DoNothing()
        self.completed = []

    def get_cost(self, task : Task) -> float:
        """
        Returns the cost for this plane to serve `task`
        """
        return self.cost_function(self, task)

    def can_see(self, task : Task) -> bool:
        """
        Checks if `task` is within this plane's visibility range
        """
        return self.state.distance_to(task.pos) <= self.visibility_range

    def get_location(self) -> list:
        return list(self.state.pos)

    def __repr__(self) -> str:
        return f'Plane({self.name})'

    def to_dict(self) -> dict:
        out = self.state.to_dict()
        out['name'] = self.name
        out['visibility_range'] = self.visibility_range
        out['completed'] = [task.id for task in self.completed]
        return out
