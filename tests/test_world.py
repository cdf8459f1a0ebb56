import unittest

from planes.agents import *
from planes.allocation import Assignment
from planes.states import PlaneState
from planes.tasks import Task
from planes.world import *


class TestTask(unittest.TestCase):
    def test_init(self):
        task = Task([1, 2], 3.0, 'T0')
        self.assertEqual(task.id, 'T0')
        self.assertEqual(task.pos, [1.0, 2.0])
        self.assertEqual(task.t_creation, 3.0)
        self.assertNotEqual(Task([0, 0]).id, Task([0, 0]).id)

        with self.assertRaises(AttributeError):
            Task('here')
        with self.assertRaises(ValueError):
            Task([1, 2, 3])
        with self.assertRaises(AttributeError):
            Task([1, 2], 'now')
        with self.assertRaises(ValueError):
            Task([1, 2], -1)

    def test_immutable(self):
        task = Task([1, 2], id='T0')
        with self.assertRaises(AttributeError):
            task.pos = [0, 0]

        pos = task.pos
        pos[0] = 10.0
        self.assertEqual(task.pos, [1.0, 2.0])


class TestPlane(unittest.TestCase):
    def test_init(self):
        plane = Plane('A0', [0, 0], 2.0, 5.0)
        self.assertEqual(plane.get_location(), [0.0, 0.0])
        self.assertEqual(plane.state.v_max, 2.0)
        self.assertTrue(isinstance(plane.idle_strategy, DoNothing))

        with self.assertRaises(AttributeError):
            Plane(1, [0, 0])
        with self.assertRaises(ValueError):
            Plane('A0', [0, 0], 1.0, 0.0)
        with self.assertRaises(ValueError):
            Plane('A0', [0, 0], -1.0)

    def test_cost(self):
        plane = Plane('A0', [0, 0])
        self.assertAlmostEqual(plane.get_cost(Task([3, 4])), 5.0)

        plane = Plane('A0', [0, 0], cost_function=lambda p, t : 7.0)
        self.assertEqual(plane.get_cost(Task([3, 4])), 7.0)

    def test_can_see(self):
        plane = Plane('A0', [0, 0], visibility_range=5.0)
        self.assertTrue(plane.can_see(Task([3, 4])))
        self.assertFalse(plane.can_see(Task([3, 4.1])))

    def test_move(self):
        state = PlaneState([0, 0], 1.0)
        state.move_towards([3, 4], 1.0)
        self.assertAlmostEqual(state.pos[0], 0.6)
        self.assertAlmostEqual(state.pos[1], 0.8)
        self.assertEqual(state.status, PlaneState.TRAVELING)
        self.assertEqual(state.t, 1.0)

        # planes do not overshoot their destination
        state = PlaneState([0, 0], 10.0)
        state.move_towards([3, 4], 1.0)
        self.assertAlmostEqual(state.distance_to([3, 4]), 0.0)

        state.hold(1.0)
        self.assertEqual(state.vel, [0.0, 0.0])
        self.assertEqual(state.status, PlaneState.IDLING)
        self.assertEqual(len(state.history), 2)


class TestIdleStrategies(unittest.TestCase):
    def test_from_name(self):
        self.assertTrue(isinstance(idle_strategy_from_name('nothing'), DoNothing))
        self.assertTrue(isinstance(idle_strategy_from_name('operator'), FlyTowardsOperator))
        with self.assertRaises(NotImplementedError):
            idle_strategy_from_name('other')

    def test_do_nothing(self):
        plane = Plane('A0', [1, 1])
        self.assertFalse(DoNothing().idle_action(plane, [Operator([0, 0], 0.5)], 1.0))
        self.assertEqual(plane.get_location(), [1.0, 1.0])

    def test_fly_towards_operator(self):
        plane = Plane('A0', [10, 0], idle_strategy=FlyTowardsOperator())
        operators = [Operator([0, 0], 2.0, 'OP_0'), Operator([20, 5], 2.0, 'OP_1')]

        self.assertTrue(plane.idle_strategy.idle_action(plane, operators, 1.0))
        self.assertEqual(plane.get_location(), [9.0, 0.0])

        # planes within range stay put
        plane = Plane('A0', [1, 0], idle_strategy=FlyTowardsOperator())
        self.assertFalse(plane.idle_strategy.idle_action(plane, operators, 1.0))
        self.assertEqual(plane.get_location(), [1.0, 0.0])

        # no operators to fly to
        self.assertFalse(plane.idle_strategy.idle_action(plane, [], 1.0))


class TestWorld(unittest.TestCase):
    def setUp(self) -> None:
        self.planes = [Plane('A0', [0, 0], visibility_range=5.0), Plane('A1', [10, 0], visibility_range=5.0)]
        self.tasks = [Task([1, 0], 0.0, 'T0'), Task([9, 0], 2.0, 'T1'), Task([5, 20], 1.0, 'T2')]

    def test_init(self):
        world = World(self.planes, tasks=self.tasks)
        self.assertEqual(world.tasks, [])
        self.assertEqual([task.id for task in world.upcoming], ['T0', 'T2', 'T1'])

        with self.assertRaises(ValueError):
            World([Plane('A0', [0, 0]), Plane('A0', [1, 1])])

    def test_introduce_tasks(self):
        world = World(self.planes, tasks=self.tasks)

        self.assertEqual(world.introduce_tasks(0.0), [self.tasks[0]])
        self.assertEqual(world.introduce_tasks(0.5), [])
        self.assertEqual(world.introduce_tasks(2.0), [self.tasks[2], self.tasks[1]])
        self.assertEqual(world.tasks, [self.tasks[0], self.tasks[2], self.tasks[1]])
        self.assertEqual(world.upcoming, [])

    def test_snapshot(self):
        world = World(self.planes, tasks=self.tasks)
        world.introduce_tasks(10.0)
        snapshot = world.snapshot(10.0)

        self.assertEqual(snapshot.t, 10.0)
        self.assertEqual(snapshot.all_tasks(), tuple(world.tasks))
        self.assertEqual(snapshot.all_planes(), tuple(self.planes))
        self.assertEqual(snapshot.visible_tasks(self.planes[0]), frozenset({self.tasks[0]}))
        self.assertEqual(snapshot.visible_tasks(self.planes[1]), frozenset({self.tasks[1]}))
        self.assertEqual(snapshot.visible_tasks(Plane('A2', [0, 0])), frozenset())

        # later changes to the world do not affect the snapshot
        world.tasks.clear()
        self.assertEqual(len(snapshot.tasks), 3)

    def test_step(self):
        world = World(self.planes, tasks=self.tasks)
        world.introduce_tasks(0.0)

        assignment = Assignment()
        assignment.assign(self.planes[0], self.tasks[0])

        completed = world.step(assignment, 0.0, 1.0)
        self.assertEqual(completed, [self.tasks[0]])
        self.assertEqual(world.tasks, [])
        self.assertEqual(self.planes[0].completed, [self.tasks[0]])
        self.assertEqual(self.planes[0].state.status, PlaneState.SERVING)
        self.assertEqual(world.completed, [{'task' : 'T0', 'plane' : 'A0', 't_creation' : 0.0, 't_completion' : 1.0}])

        # idle planes held their position
        self.assertEqual(self.planes[1].get_location(), [10.0, 0.0])

        # tasks no longer in the pool are ignored
        self.assertEqual(world.step(assignment, 1.0, 1.0), [])
        self.assertEqual(self.planes[0].get_location(), [1.0, 0.0])
