"""Trading policies"""
from .deterministic import DeterministicPolicy
from .no_action import NoActionPolicy
from .random_agent import RandomPolicy
