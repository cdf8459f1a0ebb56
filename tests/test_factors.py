import math
import unittest

from planes.agents import Plane
from planes.factors import *
from planes.tasks import Task


def fixed_costs(costs : dict):
    """ Returns a cost function reading the cost of every (plane, task) pair from `costs` """
    def cost_function(plane : Plane, task : Task) -> float:
        return costs[(plane.name, task.id)]
    return cost_function


class TestWorkloadFunctions(unittest.TestCase):
    def test_single_task(self):
        workload = SingleTaskFunction()
        self.assertEqual(workload(0), 0.0)
        self.assertEqual(workload(1), 0.0)
        self.assertTrue(math.isinf(workload(2)))
        self.assertTrue(math.isinf(workload(5)))

    def test_k_alpha(self):
        workload = KAlphaFunction(2.0, 2.0)
        self.assertAlmostEqual(workload(0), 0.0)
        self.assertAlmostEqual(workload(1), 2.0)
        self.assertAlmostEqual(workload(3), 18.0)

        with self.assertRaises(ValueError):
            KAlphaFunction(0.0, 2.0)
        with self.assertRaises(ValueError):
            KAlphaFunction(1.0, 0.5)

    def test_factory(self):
        self.assertTrue(isinstance(CostFactorFactory().build(None), SingleTaskFunction))
        self.assertTrue(isinstance(CostFactorFactory('workload', 1.0, 2.0).build(None), KAlphaFunction))

        with self.assertRaises(NotImplementedError):
            CostFactorFactory('other')
        with self.assertRaises(ValueError):
            CostFactorFactory('workload', -1.0, 2.0)


class TestFactorGraph(unittest.TestCase):
    def setUp(self) -> None:
        self.tasks = [Task([0, 0], id='T0'), Task([1, 0], id='T1'), Task([2, 0], id='T2')]
        costs = {
            ('A0', 'T0') : 1.0, ('A0', 'T1') : 2.0, ('A0', 'T2') : 3.0,
            ('A1', 'T0') : 4.0, ('A1', 'T1') : 5.0, ('A1', 'T2') : 6.0
        }
        self.planes = [Plane('A0', [0, 0], cost_function=fixed_costs(costs)),
                       Plane('A1', [0, 0], cost_function=fixed_costs(costs))]

    def test_build(self):
        visibility = {self.planes[0] : {self.tasks[0], self.tasks[1]},
                      self.planes[1] : {self.tasks[1]}}
        graph, selectors, costs = FactorGraph.build(self.tasks, self.planes, visibility)

        self.assertEqual(len(graph.factors), 5)
        self.assertEqual(len(graph.edges), 3)
        for task in self.tasks:
            self.assertEqual(graph.factors[selectors[task]].kind, FactorKinds.SELECTOR)
            self.assertIs(graph.factors[selectors[task]].owner, task)
        for plane in self.planes:
            self.assertEqual(graph.factors[costs[plane]].kind, FactorKinds.COST)
            self.assertIs(graph.factors[costs[plane]].owner, plane)

        # edges only join planes with the tasks they can see
        self.assertEqual(graph.neighbors(selectors[self.tasks[0]]), [costs[self.planes[0]]])
        self.assertEqual(graph.neighbors(selectors[self.tasks[1]]), [costs[self.planes[0]], costs[self.planes[1]]])
        self.assertEqual(graph.neighbors(selectors[self.tasks[2]]), [])
        self.assertEqual(graph.neighbors(costs[self.planes[0]]), [selectors[self.tasks[0]], selectors[self.tasks[1]]])

        # potentials are the planes' costs
        self.assertEqual(graph.get_potential(selectors[self.tasks[1]], costs[self.planes[1]]), 5.0)
        for edge in graph.edges:
            self.assertEqual(edge.to_cost, 0.0)
            self.assertEqual(edge.to_selector, 0.0)

    def test_build_workload(self):
        visibility = {plane : set(self.tasks) for plane in self.planes}
        graph, _, costs = FactorGraph.build(self.tasks, self.planes, visibility, CostFactorFactory('workload', 1.0, 2.0))

        for plane in self.planes:
            self.assertTrue(isinstance(graph.factors[costs[plane]].workload, KAlphaFunction))

    def test_link(self):
        graph = FactorGraph()
        selector = graph.add_selector(self.tasks[0])
        cost = graph.add_cost(self.planes[0], SingleTaskFunction())

        self.assertEqual(graph.link(selector, cost, 1.0), 0)
        with self.assertRaises(ValueError):
            graph.link(selector, cost, 1.0)
        with self.assertRaises(ValueError):
            graph.link(cost, selector, 1.0)

    def test_select(self):
        graph = FactorGraph()
        selector = graph.add_selector(self.tasks[0])
        self.assertIsNone(graph.select(selector))

        cost_0 = graph.add_cost(self.planes[0], SingleTaskFunction())
        cost_1 = graph.add_cost(self.planes[1], SingleTaskFunction())
        e_0 = graph.link(selector, cost_0, 1.0)
        e_1 = graph.link(selector, cost_1, 2.0)

        # ties go to the first neighbor
        self.assertEqual(graph.select(selector), cost_0)

        graph.edges[e_0].to_selector = -3.0
        graph.edges[e_1].to_selector = -1.0
        self.assertEqual(graph.select(selector), cost_1)

    def test_invalid_costs(self):
        for invalid in [-1.0, math.nan, math.inf, 'far', True]:
            plane = Plane('A0', [0, 0], cost_function=lambda p, t, cost=invalid : cost)
            with self.assertRaises(CostFunctionError):
                FactorGraph.build(self.tasks, [plane], {plane : set(self.tasks)})

        # invisible tasks are never costed
        plane = Plane('A0', [0, 0], cost_function=lambda p, t : -1.0)
        graph, _, _ = FactorGraph.build(self.tasks, [plane], {plane : set()})
        self.assertEqual(len(graph.edges), 0)

    def test_cost_function_error(self):
        plane = Plane('A0', [0, 0], cost_function=lambda p, t : -1.0)
        with self.assertRaises(ValueError):
            FactorGraph.build(self.tasks, [plane], {plane : set(self.tasks)})

        try:
            FactorGraph.build(self.tasks, [plane], {plane : set(self.tasks)})
        except CostFunctionError as e:
            self.assertIs(e.plane, plane)
            self.assertIs(e.task, self.tasks[0])
            self.assertEqual(e.cost, -1.0)

    def test_failing_cost_function(self):
        def cost_function(plane : Plane, task : Task) -> float:
            return 1.0 / 0.0

        plane = Plane('A0', [0, 0], cost_function=cost_function)
        with self.assertRaises(CostFunctionError) as context:
            FactorGraph.build(self.tasks, [plane], {plane : set(self.tasks)})

        self.assertTrue(isinstance(context.exception.__cause__, ZeroDivisionError))
        self.assertIs(context.exception.cost, context.exception.__cause__)
        self.assertIn('ZeroDivisionError', str(context.exception))

    def test_build_from_instance(self):
        visibility = {plane : set(self.tasks) for plane in self.planes}
        graph, selectors, costs = FactorGraph().build(self.tasks, self.planes, visibility)

        self.assertEqual(len(graph.edges), 6)
        self.assertEqual(len(selectors), 3)
        self.assertEqual(len(costs), 2)
