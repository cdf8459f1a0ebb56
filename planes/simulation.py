import logging
import os
from typing import Callable

import pandas as pd

from planes.agents import Operator, Plane, idle_strategy_from_name
from planes.allocation import AbstractAllocationStrategy, AllocationTypes, Assignment, GreedyAllocation, MaxSumAllocation
from planes.config import ConfigurationError, SimulationConfig
from planes.elements import SimulationElement, SimulationElementStatus
from planes.factors import CostFactorFactory
from planes.problem import Problem
from planes.progress import ProgressReporter
from planes.tasks import Task
from planes.utils import setup_results_directory
from planes.world import World

def build_strategy( config : SimulationConfig,
                    error_handler : Callable = None,
                    level : int = logging.INFO,
                    logger : logging.Logger = None
                    ) -> AbstractAllocationStrategy:
    """
    Creates the allocation strategy described by the simulation configuration
    """
    if config.allocation == AllocationTypes.MAXSUM.value:
        try:
            factory = CostFactorFactory(config.cost_factor, config.workload_k, config.workload_alpha)
        except (NotImplementedError, ValueError) as e:
            raise ConfigurationError(f'invalid cost factor configuration. {e}')
        return MaxSumAllocation(config.iterations, factory, config.damping, error_handler, level, logger)

    elif config.allocation == AllocationTypes.GREEDY.value:
        return GreedyAllocation(error_handler, level, logger)

    raise ConfigurationError(f'allocation strategy `{config.allocation}` not yet supported.')

class Simulation(SimulationElement):
    """
    ## Simulation

    Runs a problem step by step. Every step new tasks appear, the allocation strategy assigns tasks to planes, planes
    move towards their tasks and the progress reporter is informed of the fraction of simulated time elapsed.

    ### Attributes:
        - problem (:obj:`Problem`): scenario being simulated
        - config (:obj:`SimulationConfig`): simulation settings
        - clock_config (:obj:`ClockConfig`): simulation clock
        - world (:obj:`World`): planes, operators and tasks
        - strategy (:obj:`AbstractAllocationStrategy`): decides which task each plane serves
        - reporter (:obj:`ProgressReporter`): renders the simulation's progress
        - errors (`list`): errors that aborted the allocation of a step
        - assignment_history (`list`): assignment published at every step
    """
    def __init__(   self,
                    problem : Problem,
                    config : SimulationConfig = None,
                    strategy : AbstractAllocationStrategy = None,
                    reporter : ProgressReporter = None,
                    level : int = logging.INFO,
                    logger : logging.Logger = None
                ) -> None:
        super().__init__('SIMULATION', level, logger)

        config = config if config is not None else SimulationConfig()
        if not isinstance(config, SimulationConfig):
            raise ConfigurationError(f'`config` must be of type `SimulationConfig`. is of type {type(config)}.')
        if not isinstance(problem, Problem):
            raise TypeError(f'`problem` must be of type `Problem`. is of type {type(problem)}.')

        self.problem = problem
        self.config = config
        self.clock_config = problem.get_clock_config(config.time_step)

        try:
            idle_strategy = idle_strategy_from_name(config.idle_strategy)
        except NotImplementedError as e:
            raise ConfigurationError(str(e))

        planes = [Plane(plane['name'],
                        plane['pos'],
                        plane.get('speed', 1.0),
                        config.visibility_range,
                        idle_strategy=idle_strategy)
                  for plane in problem.planes]
        operators = [Operator(**operator) for operator in problem.operators]
        tasks = [Task(**task) for task in problem.tasks]
        self.world = World(planes, operators, tasks)

        self.strategy = strategy if strategy is not None else build_strategy(config, self._on_allocation_error, level, self._logger)
        if strategy is not None and strategy.error_handler is None:
            strategy.error_handler = self._on_allocation_error
        self.reporter = reporter if reporter is not None else ProgressReporter(quiet=config.quiet, level=level, logger=self._logger)

        self.errors = []
        self.assignment_history = []
        self.t = 0.0

    @staticmethod
    def from_json(problem_path : str, settings : dict = None, level : int = logging.INFO, logger : logging.Logger = None) -> object:
        """
        Initializes a simulation from a JSON problem file and a dictionary of settings
        """
        config = SimulationConfig.from_dict(settings if settings is not None else {})
        return Simulation(Problem.from_json(problem_path), config, level=level, logger=logger)

    """
    SIMULATION OPERATION METHODS
    """
    def run(self) -> int:
        """
        Executes every simulation step. Returns `1` if executed successfully
        """
        n_steps = self.clock_config.get_total_steps()
        self._log(f'running {n_steps} step(s) with `{self.strategy.name}`...', level=logging.INFO)

        self._status = SimulationElementStatus.RUNNING
        self.reporter.start()
        try:
            for step in range(n_steps):
                self.step(step)

        finally:
            self.reporter.stop()
            self._status = SimulationElementStatus.DEACTIVATED

        self._log(f'simulation done! {len(self.world.completed)} task(s) completed, {len(self.errors)} allocation error(s).', level=logging.INFO)
        return 1

    def step(self, step : int) -> Assignment:
        """
        Performs a single simulation step
        """
        t = self.clock_config.get_time(step)
        dt = self.clock_config.dt

        new_tasks = self.world.introduce_tasks(t)
        if new_tasks:
            self._log(f't={t}: {len(new_tasks)} new task(s) appeared.')

        snapshot = self.world.snapshot(t)
        assignment = self.strategy.allocate(snapshot)
        self.assignment_history.append((t, assignment))

        completed = self.world.step(assignment, t, dt)
        for task in completed:
            self._log(f't={t+dt}: task `{task.id}` completed.')

        self.t = t + dt
        self.display_step()
        return assignment

    def display_step(self) -> None:
        """
        Hands the fraction of simulated time elapsed to the progress reporter
        """
        self.reporter.report(self.clock_config.get_progress(self.t))

    def _on_allocation_error(self, e : Exception) -> None:
        self.errors.append((self.t, e))
        self._log(f't={self.t}: keeping previous assignment. {e}', level=logging.WARNING)

    """
    RESULTS
    """
    def get_results(self) -> dict:
        """
        Returns the history of every plane, the outcome of every task and the assignment of every step as data frames
        """
        plane_rows = []
        for plane in self.world.planes:
            for state in plane.state.history:
                x, y = state['pos']
                vx, vy = state['vel']
                plane_rows.append({'plane' : plane.name, 't' : state['t'], 'x' : x, 'y' : y, 'vx' : vx, 'vy' : vy, 'status' : state['status']})

        completions = {entry['task'] : entry for entry in self.world.completed}
        task_rows = []
        for task in self.world.tasks + self.world.upcoming:
            task_rows.append({'task' : task.id, 'x' : task.pos[0], 'y' : task.pos[1], 't_creation' : task.t_creation, 'plane' : None, 't_completion' : None})
        for plane in self.world.planes:
            for task in plane.completed:
                entry = completions[task.id]
                task_rows.append({'task' : task.id, 'x' : task.pos[0], 'y' : task.pos[1], 't_creation' : task.t_creation, 'plane' : entry['plane'], 't_completion' : entry['t_completion']})

        assignment_rows = []
        for t, assignment in self.assignment_history:
            for plane_name, task_id in assignment.to_dict().items():
                assignment_rows.append({'t' : t, 'plane' : plane_name, 'task' : task_id})

        return {
            'planes' : pd.DataFrame(plane_rows, columns=['plane', 't', 'x', 'y', 'vx', 'vy', 'status']),
            'tasks' : pd.DataFrame(task_rows, columns=['task', 'x', 'y', 't_creation', 'plane', 't_completion']).sort_values('t_creation', kind='stable'),
            'assignments' : pd.DataFrame(assignment_rows, columns=['t', 'plane', 'task'])
        }

    def print_results(self, results_path : str) -> dict:
        """
        Writes the simulation results to `planes.csv`, `tasks.csv` and `assignments.csv` in `results_path`
        """
        setup_results_directory(results_path)
        results = self.get_results()
        for name, df in results.items():
            df : pd.DataFrame
            df.to_csv(os.path.join(results_path, f'{name}.csv'), index=False)

        self._log(f'results written to `{results_path}`.', level=logging.INFO)
        return results
