"""Simulators that drive agents against a market"""
from .simulator import INIT_LP_ADDRESS, Simulator, get_simulator
