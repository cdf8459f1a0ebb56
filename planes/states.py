from typing import Union
import numpy as np

class PlaneState(object):
    """
    ## Plane Kinematic State

    Describes the position, velocity and status of a plane at a given simulation time

    ### Attributes:
        - pos (`list`): cartesian coordinates of the plane
        - vel (`list`): current velocity of the plane
        - v_max (`float`): maximum speed of the plane
        - status (`str`): current activity of the plane
        - t (`float`): time of the latest update in [s]
        - history (`list`): dictionaries describing every update of this state
    """
    IDLING = 'IDLING'
    TRAVELING = 'TRAVELING'
    SERVING = 'SERVING'

    def __init__(self,
                pos : list,
                v_max : float,
                vel : list = None,
                status : str = IDLING,
                t : Union[float, int] = 0,
                **_
                ) -> None:
        if isinstance(v_max, bool) or (not isinstance(v_max, float) and not isinstance(v_max, int)):
            raise AttributeError(f'`v_max` must be of type `float` or `int`. is of type {type(v_max)}.')
        if v_max <= 0:
            raise ValueError(f'`v_max` must be a positive value. is {v_max}.')

        self.pos = [float(x) for x in pos]
        self.vel = [0.0, 0.0] if vel is None else [float(v) for v in vel]
        self.v_max = v_max
        self.status = status
        self.t = t
        self.history = []

    def update_state(self,
                    t : Union[float, int],
                    vel : list = [0.0,0.0],
                    status : str = None):
        if t >= self.t:
            # update position with previous state info and new time jump
            x, y = self.pos
            vx, vy = self.vel

            dt = t - self.t
            x += vx * dt
            y += vy * dt

            self.pos = [x, y]

            # update velocity for future update
            if vel is not None:
                self.vel = list(vel)

        # update status
        if status is not None:
            self.status = status

        # update last updated time
        self.t = t
        self.history.append(self.to_dict())

    def distance_to(self, pos : list) -> float:
        return float(np.sqrt( (pos[0]-self.pos[0])**2 + (pos[1]-self.pos[1])**2 ))

    def velocity_towards(self, pos : list, dt : Union[float, int]) -> list:
        """
        Returns the velocity that takes this plane straight towards `pos` at maximum speed,
        without overshooting it within the next `dt` seconds
        """
        dist = self.distance_to(pos)
        if dist == 0.0 or dt <= 0:
            return [0.0, 0.0]

        speed = min(self.v_max, dist / dt)
        return [ speed * (pos[0] - self.pos[0]) / dist, speed * (pos[1] - self.pos[1]) / dist ]

    def move_towards(self, pos : list, dt : Union[float, int], status : str = TRAVELING) -> None:
        """
        Flies straight towards `pos` for `dt` seconds
        """
        self.vel = self.velocity_towards(pos, dt)
        self.update_state(self.t + dt, self.vel, status)

    def hold(self, dt : Union[float, int], status : str = IDLING) -> None:
        """
        Stays in place for `dt` seconds
        """
        self.vel = [0.0, 0.0]
        self.update_state(self.t + dt, self.vel, status)

    def __repr__(self) -> str:
        return str(self.to_dict())

    def to_dict(self) -> dict:
        out = {
            'pos' : list(self.pos),
            'vel' : list(self.vel),
            'v_max' : self.v_max,
            'status' : self.status,
            't' : self.t
        }

        return out
