import os
import shutil
import time

def setup_results_directory(results_path : str) -> str:
    """
    Creates an empty results directory at `results_path`. Clears its contents if it already exists.
    """
    if not os.path.exists(results_path):
        # create results directory if it doesn't exist
        os.makedirs(results_path)
    else:
        # clear results in case it already exists
        for filename in os.listdir(results_path):
            file_path = os.path.join(results_path, filename)
            if os.path.isfile(file_path) or os.path.islink(file_path):
                os.unlink(file_path)
            elif os.path.isdir(file_path):
                shutil.rmtree(file_path)

    return results_path

def runtime_tracker( f ):
    """
    Registers the run-time of every call to the method `f` in its owner's `stats`.
    Only the number of calls and the total and maximum run-times are kept.
    """

    def tracker(self, *args):
        if not isinstance(getattr(self, 'stats', None), dict):
            raise AttributeError(f"class of type `{type(self)}` must contain `stats` attribute of type `dict`.")

        t_0 = time.perf_counter()
        result = f(self, *args)
        dt = time.perf_counter() - t_0

        stats = self.stats.setdefault(f.__name__, {'n' : 0, 'total' : 0.0, 'max' : 0.0})
        stats['n'] += 1
        stats['total'] += dt
        stats['max'] = max(stats['max'], dt)

        return result

    tracker.__name__ = f.__name__
    tracker.__doc__ = f.__doc__
    return tracker
