"""
*********************************************************************************
    __  ___                _____
   /  |/  /___ __  __    / ___/__  ______ ___
  / /|_/ / __ `/ |/_/____\__ \/ / / / __ `__ \
 / /  / / /_/ />  </_____/__/ / /_/ / / / / / /
/_/  /_/\__,_/_/|_|     /____/\__,_/_/ /_/ /_/

*********************************************************************************

Max-sum message passing over a `FactorGraph`.

Every edge carries a binary variable "the plane serves the task". Messages are scalar utility differences
`U(x=1) - U(x=0)`, with utility being the negated cost:

    - selector -> cost:  r_i = - max_{k != i} q_k
    - cost -> selector:  q_j = - potential_j + B_1 - B_0

where `B_m` is the best total utility the plane can draw from its other tasks given that it already serves `m`
extra tasks. Its other tasks' gains `g_k = - potential_k + r_k` are sorted in descending order and
`B_m = max_n ( g_1 + ... + g_n - w(n + m) )` for the plane's workload function `w`.
"""
import math
from typing import Union
import numpy as np

from planes.factors import Edge, Factor, FactorGraph, FactorKinds, WorkloadFunction

# message sent by a selector with a single neighbor: the task has no alternative plane. Finite stand-in for +inf
UNCONTESTED = 1e9

def selector_messages(offers : list) -> list:
    """
    Computes the messages sent by a selector factor to each of its neighbors given the `offers` it gathered from them
    """
    n = len(offers)
    if n == 0:
        return []
    elif n == 1:
        return [UNCONTESTED]

    offers = np.asarray(offers, dtype=float)
    order = np.argsort(-offers, kind='stable')
    i_best = order[0]
    best, second = offers[order[0]], offers[order[1]]

    return [ float(-second) if i == i_best else float(-best) for i in range(n) ]

def _best_utility(prefix : np.ndarray, workload : WorkloadFunction, m : int) -> float:
    best = -math.inf
    for n in range(len(prefix)):
        penalty = workload(n + m)
        if math.isinf(penalty):
            break
        best = max(best, prefix[n] - penalty)
    return best

def cost_messages(potentials : list, incoming : list, workload : WorkloadFunction) -> list:
    """
    Computes the messages sent by a cost factor to each of its neighbors.

    ### Arguments:
        - potentials (`list`): cost of serving each neighboring task
        - incoming (`list`): messages gathered from each neighboring selector
        - workload (:obj:`WorkloadFunction`): penalty for serving several tasks at once
    """
    potentials = np.asarray(potentials, dtype=float)
    gains = np.asarray(incoming, dtype=float) - potentials

    messages = []
    for j in range(len(potentials)):
        others = np.sort(np.delete(gains, j))[::-1]
        prefix = np.concatenate(([0.0], np.cumsum(others)))

        with_j = _best_utility(prefix, workload, 1)
        without_j = _best_utility(prefix, workload, 0)
        messages.append(float(-potentials[j] + with_j - without_j))

    return messages

class MaxSumEngine(object):
    """
    ## Max-Sum Engine

    Runs a fixed number of synchronous max-sum rounds over a factor graph. Each round applies three phases to every
    factor before moving to the next phase:

        1. `tick`: advances the factor's iteration counter
        2. `gather`: stores the latest message sent by each neighbor
        3. `scatter`: computes and publishes the message for each neighbor from the gathered ones

    Convergence is not checked. The engine always performs all of its iterations.

    ### Attributes:
        - iterations (`int`): number of rounds to run
        - damping (`float`): weight of the previous message when publishing a new one
    """
    def __init__(self, iterations : int, damping : Union[float, int] = 0.0) -> None:
        if isinstance(iterations, bool) or not isinstance(iterations, int):
            raise TypeError(f'`iterations` must be of type `int`. is of type {type(iterations)}.')
        if iterations < 0:
            raise ValueError(f'`iterations` must be a non-negative value. is {iterations}.')
        if isinstance(damping, bool) or (not isinstance(damping, float) and not isinstance(damping, int)):
            raise TypeError(f'`damping` must be of type `float`. is of type {type(damping)}.')
        if damping < 0 or damping >= 1:
            raise ValueError(f'`damping` must be a value in [0, 1). is {damping}.')

        self.iterations = iterations
        self.damping = damping

        self.__scatter = {
            FactorKinds.SELECTOR : self.__scatter_selector,
            FactorKinds.COST : self.__scatter_cost
        }

    def run(self, graph : FactorGraph) -> FactorGraph:
        for _ in range(self.iterations):
            for factor in graph.factors:
                self.tick(graph, factor)
            for factor in graph.factors:
                self.gather(graph, factor)
            for factor in graph.factors:
                self.scatter(graph, factor)

        return graph

    def tick(self, _ : FactorGraph, factor : Factor) -> None:
        factor.iteration += 1

    def gather(self, graph : FactorGraph, factor : Factor) -> None:
        if factor.kind == FactorKinds.SELECTOR:
            factor.incoming = {e : graph.edges[e].to_selector for e in factor.edges}
        else:
            factor.incoming = {e : graph.edges[e].to_cost for e in factor.edges}

    def scatter(self, graph : FactorGraph, factor : Factor) -> None:
        self.__scatter[factor.kind](graph, factor)

    def __damp(self, previous : float, computed : float) -> float:
        if self.damping == 0:
            return computed
        return self.damping * previous + (1 - self.damping) * computed

    def __scatter_selector(self, graph : FactorGraph, factor : Factor) -> None:
        messages = selector_messages([factor.incoming[e] for e in factor.edges])
        for e, message in zip(factor.edges, messages):
            edge : Edge = graph.edges[e]
            edge.to_cost = self.__damp(edge.to_cost, message)

    def __scatter_cost(self, graph : FactorGraph, factor : Factor) -> None:
        potentials = [graph.edges[e].potential for e in factor.edges]
        incoming = [factor.incoming[e] for e in factor.edges]

        messages = cost_messages(potentials, incoming, factor.workload)
        for e, message in zip(factor.edges, messages):
            edge : Edge = graph.edges[e]
            edge.to_selector = self.__damp(edge.to_selector, message)
