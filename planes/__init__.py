""" 
Planes Max-Sum Task Allocation Simulator Documentation
===================================

PLANES is a simulation platform for fleets of unmanned aerial vehicles that must serve tasks appearing over a geographic area.
Tasks are allocated to planes every simulation step through a max-sum message-passing algorithm run over a factor graph
linking every task to the planes that can see it.
 
"""

__version__ = "0.1.0"
