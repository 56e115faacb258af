"""Agents that trade against a market"""
from .agent import Agent
