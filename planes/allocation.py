import logging
import threading
from abc import abstractmethod
from enum import Enum
from types import MappingProxyType
from typing import Callable, Union

from planes.agents import Plane
from planes.elements import SimulationElement, SimulationElementStatus
from planes.factors import CostFactorFactory, CostFunctionError, FactorGraph
from planes.maxsum import MaxSumEngine
from planes.tasks import Task
from planes.utils import runtime_tracker

class AllocationTypes(Enum):
    MAXSUM = 'maxsum'   # max-sum over a task/plane factor graph
    GREEDY = 'greedy'   # every task goes to its cheapest free plane

class AllocationPhases(Enum):
    IDLE = 'IDLE'
    BUILD = 'BUILD'
    ITERATE = 'ITERATE'
    EXTRACT = 'EXTRACT'
    PUBLISH = 'PUBLISH'

class Assignment(object):
    """
    ## Assignment

    Mapping of planes to the task each one serves and its inverse mapping of tasks to planes.
    Each plane serves at most one task and each task is served by at most one plane.
    Assignments become read-only once frozen, which happens when a strategy publishes them.
    """
    def __init__(self) -> None:
        self.__assignment = {}
        self.__reverse = {}
        self.__frozen = False

    @property
    def assignment(self) -> MappingProxyType:
        """ plane -> task """
        return MappingProxyType(self.__assignment)

    @property
    def reverse_assignment(self) -> MappingProxyType:
        """ task -> plane """
        return MappingProxyType(self.__reverse)

    def assign(self, plane : Plane, task : Task) -> Union[Task, None]:
        """
        Assigns `task` to `plane`. Any task previously held by the plane becomes unassigned and is returned.
        """
        if self.__frozen:
            raise RuntimeError('published assignments cannot be modified.')
        if task in self.__reverse and self.__reverse[task] is not plane:
            raise ValueError(f'task `{task.id}` is already assigned to `{self.__reverse[task].name}`.')

        displaced = self.__assignment.get(plane, None)
        if displaced is not None:
            self.__reverse.pop(displaced)

        self.__assignment[plane] = task
        self.__reverse[task] = plane
        return displaced

    def freeze(self) -> None:
        self.__frozen = True

    def is_frozen(self) -> bool:
        return self.__frozen

    def get_task(self, plane : Plane) -> Union[Task, None]:
        return self.__assignment.get(plane, None)

    def get_plane(self, task : Task) -> Union[Plane, None]:
        return self.__reverse.get(task, None)

    def __len__(self) -> int:
        return len(self.__assignment)

    def __eq__(self, other) -> bool:
        other : Assignment
        return isinstance(other, Assignment) and self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f'Assignment({self.to_dict()})'

    def to_dict(self) -> dict:
        """
        Returns the assignment as a dictionary of plane names to task ids
        """
        return {plane.name : task.id for plane, task in self.__assignment.items()}

def extract_assignment(graph : FactorGraph, tasks : list, selectors : dict) -> Assignment:
    """
    Reads the plane preferred by each task out of a factor graph and resolves conflicts in a single pass.

    Tasks are visited in pool order. A task whose preferred plane is free is assigned to it. If the plane already holds
    a task from this same pass, the new task replaces it only when it is strictly cheaper for the plane; the displaced
    task is left unassigned.
    """
    assignment = Assignment()
    for task in tasks:
        selector = selectors[task]
        cost = graph.select(selector)
        if cost is None:
            # no plane can see this task
            continue

        plane : Plane = graph.factors[cost].owner
        held : Task = assignment.get_task(plane)
        if held is None or graph.get_potential(selector, cost) < graph.get_potential(selectors[held], cost):
            assignment.assign(plane, task)

    return assignment

"""
------------------
ALLOCATION STRATEGIES
------------------
"""
class AbstractAllocationStrategy(SimulationElement):
    """
    ## Abstract Allocation Strategy

    Decides, every simulation step, which task each plane serves.

    ### Attributes:
        - phase (:obj:`AllocationPhases`): phase of the allocation currently being performed
        - stats (`dict`): run-times of every allocation phase
        - errors (`list`): errors that aborted an allocation
        - error_handler (`callable`): receives every error that aborts an allocation
    """
    def __init__(self,
                name : str,
                error_handler : Callable = None,
                level : int = logging.INFO,
                logger : logging.Logger = None
                ) -> None:
        super().__init__(name, level, logger)
        self.phase = AllocationPhases.IDLE
        self.stats = {}
        self.errors = []
        self.error_handler = error_handler

        self.__assignment = Assignment()
        self.__assignment.freeze()
        self.__lock = threading.Lock()
        self._status = SimulationElementStatus.ACTIVATED

    @property
    def assignment(self) -> Assignment:
        """
        Latest published assignment
        """
        with self.__lock:
            return self.__assignment

    def allocate(self, snapshot : object) -> Assignment:
        """
        Computes and publishes the assignment for the world `snapshot`.

        If the allocation fails because of a malformed cost, the previous assignment remains in effect and the error is
        passed on to the error handler.
        """
        self._status = SimulationElementStatus.RUNNING
        try:
            assignment = self._allocate(snapshot)

        except CostFunctionError as e:
            self._log(f'allocation aborted at phase {self.phase.value}. {e}', level=logging.ERROR)
            self.errors.append(e)
            if self.error_handler is not None:
                self.error_handler(e)
            return self.assignment

        finally:
            self.phase = AllocationPhases.IDLE
            self._status = SimulationElementStatus.ACTIVATED

        self.publish(assignment)
        return assignment

    def publish(self, assignment : Assignment) -> None:
        self.phase = AllocationPhases.PUBLISH
        assignment.freeze()
        with self.__lock:
            self.__assignment = assignment
        self.phase = AllocationPhases.IDLE
        self._log(f'published assignment of {len(assignment)} task(s): {assignment.to_dict()}')

    @abstractmethod
    def _allocate(self, snapshot : object) -> Assignment:
        """
        Computes a new assignment for the world `snapshot`
        """

class MaxSumAllocation(AbstractAllocationStrategy):
    """
    ## Max-Sum Allocation

    Builds a factor graph from the visibility of every plane, runs max-sum over it and extracts the resulting assignment.

    ### Attributes:
        - engine (:obj:`MaxSumEngine`): runs the max-sum rounds
        - factory (:obj:`CostFactorFactory`): builds the cost factor of each plane
    """
    def __init__(self,
                iterations : int,
                factory : CostFactorFactory = None,
                damping : Union[float, int] = 0.0,
                error_handler : Callable = None,
                level : int = logging.INFO,
                logger : logging.Logger = None
                ) -> None:
        super().__init__('MAXSUM_ALLOCATION', error_handler, level, logger)
        self.engine = MaxSumEngine(iterations, damping)
        self.factory = factory if factory is not None else CostFactorFactory()

    def _allocate(self, snapshot : object) -> Assignment:
        graph, selectors, _ = self.build(snapshot)
        self.iterate(graph)
        return self.extract(graph, snapshot, selectors)

    @runtime_tracker
    def build(self, snapshot : object) -> tuple:
        self.phase = AllocationPhases.BUILD
        visibility = {plane : snapshot.visible_tasks(plane) for plane in snapshot.planes}
        graph, selectors, costs = FactorGraph.build(snapshot.tasks, snapshot.planes, visibility, self.factory)
        self._log(f'built factor graph with {len(graph.factors)} factors and {len(graph.edges)} edges.')
        return graph, selectors, costs

    @runtime_tracker
    def iterate(self, graph : FactorGraph) -> FactorGraph:
        self.phase = AllocationPhases.ITERATE
        return self.engine.run(graph)

    @runtime_tracker
    def extract(self, graph : FactorGraph, snapshot : object, selectors : dict) -> Assignment:
        self.phase = AllocationPhases.EXTRACT
        return extract_assignment(graph, snapshot.tasks, selectors)

class GreedyAllocation(AbstractAllocationStrategy):
    """
    ## Greedy Allocation

    Visits tasks in pool order and assigns each one to the cheapest plane that can see it and is still free.
    """
    def __init__(self,
                error_handler : Callable = None,
                level : int = logging.INFO,
                logger : logging.Logger = None
                ) -> None:
        super().__init__('GREEDY_ALLOCATION', error_handler, level, logger)

    @runtime_tracker
    def _allocate(self, snapshot : object) -> Assignment:
        self.phase = AllocationPhases.BUILD
        visibility = {plane : snapshot.visible_tasks(plane) for plane in snapshot.planes}

        # validates every cost before assigning anything
        graph, selectors, costs = FactorGraph.build(snapshot.tasks, snapshot.planes, visibility)

        self.phase = AllocationPhases.EXTRACT
        assignment = Assignment()
        for task in snapshot.tasks:
            best, best_cost = None, None
            for plane in snapshot.planes:
                if assignment.get_task(plane) is not None or task not in visibility[plane]:
                    continue
                cost = graph.get_potential(selectors[task], costs[plane])
                if best is None or cost < best_cost:
                    best, best_cost = plane, cost

            if best is not None:
                assignment.assign(best, task)

        return assignment
