import json
import math
from typing import Union

from planes.agents import IdleStrategies
from planes.allocation import AllocationTypes
from planes.factors import CostFactorPolicies

class ConfigurationError(ValueError):
    """
    Raised when the simulation settings are missing or invalid
    """

DEFAULT_SETTINGS = {
    'allocation' : AllocationTypes.MAXSUM.value,
    'iterations' : 20,
    'damping' : 0.0,
    'cost-factor' : CostFactorPolicies.SINGLE.value,
    'workload-k' : 1.0,
    'workload-alpha' : 2.0,
    'idle-strategy' : IdleStrategies.NOTHING.value,
    'visibility-range' : math.inf,
    'time-step' : 1.0,
    'quiet' : False
}

SETTINGS_HELP = {
    'allocation' : 'task allocation strategy (maxsum, greedy)',
    'iterations' : 'number of max-sum rounds run every simulation step',
    'damping' : 'weight of the previous message when publishing a new max-sum message, in [0, 1)',
    'cost-factor' : 'cost factor used by every plane (single, workload)',
    'workload-k' : 'k parameter of the k-alpha workload function',
    'workload-alpha' : 'alpha parameter of the k-alpha workload function',
    'idle-strategy' : 'behaviour of planes without a task (nothing, operator)',
    'visibility-range' : 'maximum distance at which a plane can see a task',
    'time-step' : 'simulated seconds per simulation step',
    'quiet' : 'disable progress reporting'
}

def _to_bool(key : str, value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ['true', 'yes', '1']:
        return True
    if isinstance(value, str) and value.strip().lower() in ['false', 'no', '0']:
        return False
    raise ConfigurationError(f'setting `{key}` must be a boolean. is `{value}`.')

def _to_int(key : str, value) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f'setting `{key}` must be an integer. is `{value}`.')
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ConfigurationError(f'setting `{key}` must be an integer. is `{value}`.')

def _to_float(key : str, value) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f'setting `{key}` must be a number. is `{value}`.')
    if isinstance(value, (int, float)):
        value = float(value)
    elif isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ConfigurationError(f'setting `{key}` must be a number. is `{value}`.')
    else:
        raise ConfigurationError(f'setting `{key}` must be a number. is `{value}`.')

    if math.isnan(value):
        raise ConfigurationError(f'setting `{key}` must be a number. is `{value}`.')
    return value

def _to_choice(key : str, value, choices : list) -> str:
    value = str(value).strip()
    if value not in choices:
        raise ConfigurationError(f'setting `{key}` must be one of {choices}. is `{value}`.')
    return value

def load_settings(path : str) -> dict:
    """
    Reads a settings file made of `key = value` lines. Blank lines and lines starting with `#` are ignored
    """
    settings = {}
    with open(path, 'r') as settings_file:
        for n, line in enumerate(settings_file):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                raise ConfigurationError(f'unable to parse line {n+1} of settings file `{path}`: `{line}`.')
            key, value = line.split('=', 1)
            settings[key.strip()] = value.strip()
    return settings

def parse_overrides(overrides : list) -> dict:
    """
    Parses a list of `key=value` strings
    """
    settings = {}
    for override in overrides:
        if '=' not in override:
            raise ConfigurationError(f'override `{override}` must be of the form `setting=value`.')
        key, value = override.split('=', 1)
        settings[key.strip()] = value.strip()
    return settings

def dump_settings(settings : dict = None) -> str:
    """
    Returns the given settings, or the default ones, in settings-file format
    """
    settings = settings if settings is not None else DEFAULT_SETTINGS
    lines = []
    for key, value in settings.items():
        if key in SETTINGS_HELP:
            lines.append(f'# {SETTINGS_HELP[key]}')
        lines.append(f'{key} = {value}')
    return '\n'.join(lines) + '\n'

class SimulationConfig(object):
    """
    ## Simulation Configuration

    Validated simulation settings.

    ### Attributes:
        - allocation (`str`): task allocation strategy
        - iterations (`int`): number of max-sum rounds run every simulation step
        - damping (`float`): max-sum message damping
        - cost_factor (`str`): cost factor policy used by every plane
        - workload_k (`float`): k parameter of the k-alpha workload function
        - workload_alpha (`float`): alpha parameter of the k-alpha workload function
        - idle_strategy (`str`): behaviour of planes without a task
        - visibility_range (`float`): maximum distance at which a plane can see a task
        - time_step (`float`): simulated seconds per simulation step
        - quiet (`bool`): disables progress reporting
    """
    def __init__(   self,
                    allocation : str = DEFAULT_SETTINGS['allocation'],
                    iterations : int = DEFAULT_SETTINGS['iterations'],
                    damping : float = DEFAULT_SETTINGS['damping'],
                    cost_factor : str = DEFAULT_SETTINGS['cost-factor'],
                    workload_k : float = DEFAULT_SETTINGS['workload-k'],
                    workload_alpha : float = DEFAULT_SETTINGS['workload-alpha'],
                    idle_strategy : str = DEFAULT_SETTINGS['idle-strategy'],
                    visibility_range : Union[float, int] = DEFAULT_SETTINGS['visibility-range'],
                    time_step : Union[float, int] = DEFAULT_SETTINGS['time-step'],
                    quiet : bool = DEFAULT_SETTINGS['quiet']
                ) -> None:
        # strategy config
        self.allocation = _to_choice('allocation', allocation, [a.value for a in AllocationTypes])
        self.iterations = _to_int('iterations', iterations)
        self.damping = _to_float('damping', damping)
        self.cost_factor = _to_choice('cost-factor', cost_factor, [p.value for p in CostFactorPolicies])
        self.workload_k = _to_float('workload-k', workload_k)
        self.workload_alpha = _to_float('workload-alpha', workload_alpha)

        # plane config
        self.idle_strategy = _to_choice('idle-strategy', idle_strategy, [s.value for s in IdleStrategies])
        self.visibility_range = _to_float('visibility-range', visibility_range)

        # simulation config
        self.time_step = _to_float('time-step', time_step)
        self.quiet = _to_bool('quiet', quiet)

        if self.iterations < 0:
            raise ConfigurationError(f'setting `iterations` must be a non-negative integer. is {self.iterations}.')
        if self.damping < 0 or self.damping >= 1:
            raise ConfigurationError(f'setting `damping` must be a value in [0, 1). is {self.damping}.')
        if self.workload_k <= 0 or math.isinf(self.workload_k):
            raise ConfigurationError(f'setting `workload-k` must be a positive value. is {self.workload_k}.')
        if self.workload_alpha < 1 or math.isinf(self.workload_alpha):
            raise ConfigurationError(f'setting `workload-alpha` must be greater or equal to 1. is {self.workload_alpha}.')
        if self.visibility_range <= 0:
            raise ConfigurationError(f'setting `visibility-range` must be a positive value. is {self.visibility_range}.')
        if self.time_step <= 0 or math.isinf(self.time_step):
            raise ConfigurationError(f'setting `time-step` must be a positive value. is {self.time_step}.')

    @staticmethod
    def from_dict(settings : dict) -> object:
        """
        Creates a configuration from a dictionary of settings. Missing settings take their default value
        """
        unknown = [key for key in settings if key not in DEFAULT_SETTINGS]
        if unknown:
            raise ConfigurationError(f'unknown settings {unknown}. available settings: {list(DEFAULT_SETTINGS.keys())}.')

        merged = dict(DEFAULT_SETTINGS)
        merged.update(settings)
        return SimulationConfig(**{key.replace('-', '_') : value for key, value in merged.items()})

    def __eq__(self, other) -> bool:
        other : SimulationConfig
        return isinstance(other, SimulationConfig) and self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        """
        Returns the settings of this configuration, keyed by setting name
        """
        return {key.replace('_', '-') : value for key, value in self.__dict__.items()}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
