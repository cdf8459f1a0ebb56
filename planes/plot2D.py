import matplotlib
import matplotlib.pyplot as plt
import pandas as pd

def plot_trajectories(results : dict, path : str = None, show : bool = False) -> object:
    """
    Plots the trajectory of every plane together with the location of every task.
    Completed tasks are drawn as red stars, unserved tasks as grey crosses.

    ### Arguments:
        - results (`dict`): data frames returned by `Simulation.get_results()`
        - path (`str`): file where the figure is saved. Not saved if `None`
        - show (`bool`): displays the figure

    ### Returns:
        - fig (:obj:`Figure`): the new figure
    """
    planes : pd.DataFrame = results['planes']
    tasks : pd.DataFrame = results['tasks']

    if not show:
        matplotlib.use('Agg')

    fig, ax = plt.subplots()
    plt.grid(True)
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title('plane trajectories')

    # plot plane trajectories
    for name, df in planes.groupby('plane', sort=False):
        df : pd.DataFrame = df.sort_values('t')
        lines = ax.plot(df['x'], df['y'], label=name)
        ax.scatter(df['x'].iloc[-1:], df['y'].iloc[-1:], color=lines[0].get_color())

    # plot task locations
    completed = tasks[tasks['t_completion'].notna()]
    pending = tasks[tasks['t_completion'].isna()]
    ax.scatter(completed['x'], completed['y'], color='r', marker='*', label='completed')
    ax.scatter(pending['x'], pending['y'], color='grey', marker='x', label='unserved')
    ax.legend()

    if path is not None:
        fig.savefig(path)
    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig
