import json
import uuid
from typing import Union

class Task(object):
    """
    Describes a task to be served by a plane in the simulation

    ### Attributes:
        - pos (`list`): cartesian coordinates of the location of this task
        - t_creation (`float`): time at which this task appears in [s] from the beginning of the simulation
        - id (`str`) : identifying number for this task in uuid format
    """
    def __init__(self,
                pos : list,
                t_creation : Union[float, int] = 0.0,
                id : str = None,
                **_
                ) -> None:
        """
        Creates an instance of a task

        ### Arguments:
            - pos (`list`): cartesian coordinates of the location of this task
            - t_creation (`float`): time at which this task appears in [s] from the beginning of the simulation
            - id (`str`) : identifying number for this task. A new uuid is generated if none is given
        """
        # check arguments
        if not isinstance(pos, list) and not isinstance(pos, tuple):
            raise AttributeError(f'`pos` must be of type `list`. is of type {type(pos)}.')
        elif len(pos) != 2:
            raise ValueError(f'`pos` must be a list of 2 values. is of length {len(pos)}.')
        for x in pos:
            if isinstance(x, bool) or (not isinstance(x, float) and not isinstance(x, int)):
                raise AttributeError(f'`pos` must contain values of type `float` or `int`. contains {type(x)}.')
        if isinstance(t_creation, bool) or (not isinstance(t_creation, float) and not isinstance(t_creation, int)):
            raise AttributeError(f'`t_creation` must be of type `float` or type `int`. is of type {type(t_creation)}.')
        if t_creation < 0:
            raise ValueError(f'`t_creation` must be a non-negative value. is {t_creation}.')

        self.__pos = (float(pos[0]), float(pos[1]))
        self.__t_creation = t_creation
        self.__id = str(id) if id is not None else str(uuid.uuid1())

    @property
    def id(self) -> str:
        return self.__id

    @property
    def pos(self) -> list:
        return list(self.__pos)

    @property
    def t_creation(self) -> Union[float, int]:
        return self.__t_creation

    def __repr__(self) -> str:
        return f'Task({self.id})'

    def __str__(self) -> str:
        return str(self.to_dict())

    def to_dict(self) -> dict:
        """
        Crates a dictionary containing all information contained in this task
        """
        return {'id' : self.id, 'pos' : self.pos, 't_creation' : self.t_creation}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
