"""
*********************************************************************************
    ______           __                 ______                 __
   / ____/___ ______/ /_____  _____   / ____/________ _____  / /_
  / /_  / __ `/ ___/ __/ __ \/ ___/  / / __/ ___/ __ `/ __ \/ __ \
 / __/ / /_/ / /__/ /_/ /_/ / /     / /_/ / /  / /_/ / /_/ / / / /
/_/    \__,_/\___/\__/\____/_/      \____/_/   \__,_/ .___/_/ /_/
                                                   /_/
*********************************************************************************

Bipartite factor graph linking every pending task (`SELECTOR` factors) to every plane that can see it (`COST` factors).

Factors live in an arena and are addressed by their index. Edges are stored once, as a pair of factor indices plus the
plane's cost for the task (its potential), together with the two scalar messages exchanged along the edge.
"""
import math
import numbers
from abc import ABC, abstractmethod
from enum import Enum
from typing import Union

from planes.agents import Plane
from planes.tasks import Task

class CostFunctionError(ValueError):
    """
    Raised when a plane's cost function fails or returns a negative, NaN or infinite value.
    `cost` holds the exception raised by the cost function if it failed.
    """
    def __init__(self, plane : Plane, task : Task, cost) -> None:
        if isinstance(cost, Exception):
            msg = f'cost function of `{plane.name}` failed for task `{task.id}`. {type(cost).__name__}: {cost}'
        else:
            msg = f'cost of `{plane.name}` for task `{task.id}` must be a finite non-negative value. is {cost}.'
        super().__init__(msg)
        self.plane = plane
        self.task = task
        self.cost = cost

class FactorKinds(Enum):
    SELECTOR = 'SELECTOR'   # one per task: exactly one plane serves the task
    COST = 'COST'           # one per plane: weighs the tasks served by the plane

"""
------------------
WORKLOAD FUNCTIONS
------------------
"""
class WorkloadFunction(ABC):
    """
    Penalty incurred by a plane for serving `n` tasks at once. Infinite values forbid that many tasks.
    """
    @abstractmethod
    def __call__(self, n : int) -> float:
        pass

class SingleTaskFunction(WorkloadFunction):
    """
    Planes serve at most one task
    """
    def __call__(self, n : int) -> float:
        return 0.0 if n <= 1 else math.inf

class KAlphaFunction(WorkloadFunction):
    """
    Planes may serve any number of tasks, paying `k * n^alpha` for serving `n` of them
    """
    def __init__(self, k : Union[float, int], alpha : Union[float, int]) -> None:
        if k <= 0:
            raise ValueError(f'`k` must be a positive value. is {k}.')
        if alpha < 1:
            raise ValueError(f'`alpha` must be greater or equal to 1. is {alpha}.')
        self.k = k
        self.alpha = alpha

    def __call__(self, n : int) -> float:
        return self.k * n ** self.alpha

class CostFactorPolicies(Enum):
    SINGLE = 'single'
    WORKLOAD = 'workload'

class CostFactorFactory(object):
    """
    Builds the workload function of the cost factor of each plane according to the configured policy
    """
    def __init__(self, policy : str = CostFactorPolicies.SINGLE.value, k : Union[float, int] = 1.0, alpha : Union[float, int] = 2.0) -> None:
        if policy not in [p.value for p in CostFactorPolicies]:
            raise NotImplementedError(f'cost factor policy `{policy}` not yet supported.')
        self.policy = policy
        self.k = k
        self.alpha = alpha

        # fail early on invalid workload parameters
        self.build(None)

    def build(self, _ : Plane) -> WorkloadFunction:
        if self.policy == CostFactorPolicies.WORKLOAD.value:
            return KAlphaFunction(self.k, self.alpha)
        return SingleTaskFunction()

"""
------------------
FACTOR GRAPH
------------------
"""
class Factor(object):
    """
    ## Factor

    Node of the factor graph.

    ### Attributes:
        - index (`int`): position of this factor in the graph's arena
        - kind (:obj:`FactorKinds`): whether this factor stands for a task or for a plane
        - owner (:obj:`Task` or :obj:`Plane`): task or plane this factor stands for
        - edges (`list`): indices of the edges incident to this factor, in construction order
        - incoming (`dict`): latest gathered message for every incident edge
        - iteration (`int`): number of max-sum rounds this factor has taken part in
        - workload (:obj:`WorkloadFunction`): workload penalty of `COST` factors. `None` for `SELECTOR` factors
    """
    def __init__(self, index : int, kind : FactorKinds, owner : object, workload : WorkloadFunction = None) -> None:
        self.index = index
        self.kind = kind
        self.owner = owner
        self.edges = []
        self.incoming = {}
        self.iteration = 0
        self.workload = workload

    def __repr__(self) -> str:
        return f'{self.kind.value}[{self.index}]({self.owner})'

class Edge(object):
    """
    ## Edge

    Link between a `SELECTOR` factor and a `COST` factor.

    ### Attributes:
        - index (`int`): position of this edge in the graph
        - selector (`int`): index of the task's factor
        - cost (`int`): index of the plane's factor
        - potential (`float`): cost for the plane to serve the task
        - to_cost (`float`): latest message sent by the selector to the cost factor
        - to_selector (`float`): latest message sent by the cost factor to the selector
    """
    def __init__(self, index : int, selector : int, cost : int, potential : float) -> None:
        self.index = index
        self.selector = selector
        self.cost = cost
        self.potential = potential
        self.to_cost = 0.0
        self.to_selector = 0.0

class FactorGraph(object):
    """
    ## Factor Graph

    Arena holding all factors and edges built for one allocation step
    """
    def __init__(self) -> None:
        self.factors = []
        self.edges = []
        self.__potentials = {}

    def add_selector(self, task : Task) -> int:
        index = len(self.factors)
        self.factors.append(Factor(index, FactorKinds.SELECTOR, task))
        return index

    def add_cost(self, plane : Plane, workload : WorkloadFunction) -> int:
        index = len(self.factors)
        self.factors.append(Factor(index, FactorKinds.COST, plane, workload))
        return index

    def link(self, selector : int, cost : int, potential : float) -> int:
        """
        Links a selector with a cost factor. Returns the index of the new edge
        """
        if self.factors[selector].kind != FactorKinds.SELECTOR:
            raise ValueError(f'factor {selector} is not a selector factor.')
        if self.factors[cost].kind != FactorKinds.COST:
            raise ValueError(f'factor {cost} is not a cost factor.')
        if (selector, cost) in self.__potentials:
            raise ValueError(f'factors {selector} and {cost} are already linked.')

        index = len(self.edges)
        self.edges.append(Edge(index, selector, cost, potential))
        self.factors[selector].edges.append(index)
        self.factors[cost].edges.append(index)
        self.__potentials[(selector, cost)] = potential
        return index

    def neighbors(self, index : int) -> list:
        """
        Returns the indices of the factors linked to factor `index`, in construction order
        """
        factor : Factor = self.factors[index]
        if factor.kind == FactorKinds.SELECTOR:
            return [self.edges[e].cost for e in factor.edges]
        return [self.edges[e].selector for e in factor.edges]

    def get_potential(self, selector : int, cost : int) -> float:
        return self.__potentials[(selector, cost)]

    def select(self, selector : int) -> Union[int, None]:
        """
        Returns the index of the cost factor preferred by `selector` according to the latest messages it was sent:
        the neighbor offering the highest message (lowest effective cost). Ties go to the earliest linked neighbor.

        Returns `None` if the selector has no neighbors.
        """
        best, best_value = None, -math.inf
        for e in self.factors[selector].edges:
            edge : Edge = self.edges[e]
            if best is None or edge.to_selector > best_value:
                best, best_value = edge.cost, edge.to_selector
        return best

    @staticmethod
    def build(tasks : list, planes : list, visibility : dict, factory : CostFactorFactory = None) -> tuple:
        """
        Builds the factor graph for a set of tasks and planes.

        ### Arguments:
            - tasks (`list`): pending tasks, in pool order
            - planes (`list`): planes, in fleet order
            - visibility (`dict`): tasks visible to each plane
            - factory (:obj:`CostFactorFactory`): builds the cost factor of each plane

        ### Returns:
            - graph (:obj:`FactorGraph`): the new factor graph
            - selectors (`dict`): index of the selector factor of every task
            - costs (`dict`): index of the cost factor of every plane
        """
        factory = factory if factory is not None else CostFactorFactory()
        graph = FactorGraph()

        selectors = {}
        for task in tasks:
            selectors[task] = graph.add_selector(task)

        costs = {}
        for plane in planes:
            plane : Plane
            costs[plane] = graph.add_cost(plane, factory.build(plane))

            # link it with all the selectors of the tasks it can see
            for task in tasks:
                if task not in visibility.get(plane, ()):
                    continue
                try:
                    potential = plane.get_cost(task)
                except Exception as e:
                    raise CostFunctionError(plane, task, e) from e

                if (isinstance(potential, bool)
                    or not isinstance(potential, numbers.Real)
                    or math.isnan(potential)
                    or math.isinf(potential)
                    or potential < 0):
                    raise CostFunctionError(plane, task, potential)
                graph.link(selectors[task], costs[plane], float(potential))

        return graph, selectors, costs
