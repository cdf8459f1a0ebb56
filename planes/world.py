from typing import Union

from planes.agents import Plane
from planes.states import PlaneState
from planes.tasks import Task

# distance under which a plane is considered to have reached its task
ARRIVAL_TOLERANCE = 1e-6

class WorldSnapshot(object):
    """
    ## World Snapshot

    Immutable view of the world captured once per simulation step: the pending tasks in pool order, the planes in fleet
    order and the tasks visible to every plane.
    """
    def __init__(self, t : Union[float, int], tasks : list, planes : list, visibility : dict) -> None:
        self.t = t
        self.tasks = tuple(tasks)
        self.planes = tuple(planes)
        self.__visibility = {plane : frozenset(visibility.get(plane, ())) for plane in self.planes}

    def visible_tasks(self, plane : Plane) -> frozenset:
        return self.__visibility.get(plane, frozenset())

    def all_tasks(self) -> tuple:
        return self.tasks

    def all_planes(self) -> tuple:
        return self.planes

class World(object):
    """
    ## World

    Holds the planes, operators and tasks of the simulation.

    ### Attributes:
        - planes (`list`): planes in fleet order
        - operators (`list`): ground operators
        - tasks (`list`): pending tasks in the order they appeared
        - upcoming (`list`): tasks that have not appeared yet, sorted by creation time
        - completed (`list`): dictionaries describing every completed task
    """
    def __init__(self, planes : list, operators : list = None, tasks : list = None) -> None:
        names = [plane.name for plane in planes]
        if len(names) != len(set(names)):
            raise ValueError(f'plane names must be unique. got {names}.')

        self.planes = list(planes)
        self.operators = list(operators) if operators is not None else []
        self.tasks = []
        self.upcoming = sorted(tasks if tasks is not None else [], key=lambda task : task.t_creation)
        self.completed = []

    def introduce_tasks(self, t : Union[float, int]) -> list:
        """
        Adds to the task pool every upcoming task created at or before time `t`. Returns the new tasks
        """
        new_tasks = []
        while self.upcoming and self.upcoming[0].t_creation <= t:
            new_tasks.append(self.upcoming.pop(0))
        self.tasks.extend(new_tasks)
        return new_tasks

    def visible_tasks(self, plane : Plane) -> set:
        return {task for task in self.tasks if plane.can_see(task)}

    def snapshot(self, t : Union[float, int]) -> WorldSnapshot:
        """
        Captures the pending tasks and the visibility of every plane at time `t`
        """
        visibility = {plane : self.visible_tasks(plane) for plane in self.planes}
        return WorldSnapshot(t, self.tasks, self.planes, visibility)

    def step(self, assignment : object, t : Union[float, int], dt : Union[float, int]) -> list:
        """
        Moves every plane for `dt` seconds: planes fly towards their assigned task, completing it on arrival,
        and planes without a task perform their idle action.

        Returns the tasks completed during this step
        """
        completed = []
        for plane in self.planes:
            plane : Plane
            task : Task = assignment.get_task(plane)

            if task is None or task not in self.tasks:
                plane.idle_strategy.idle_action(plane, self.operators, dt)
                continue

            plane.state.move_towards(task.pos, dt, PlaneState.TRAVELING)
            if plane.state.distance_to(task.pos) <= ARRIVAL_TOLERANCE:
                self.complete(plane, task, t + dt)
                completed.append(task)

        return completed

    def complete(self, plane : Plane, task : Task, t : Union[float, int]) -> None:
        self.tasks.remove(task)
        plane.completed.append(task)
        plane.state.status = PlaneState.SERVING
        self.completed.append({
            'task' : task.id,
            'plane' : plane.name,
            't_creation' : task.t_creation,
            't_completion' : t
        })

