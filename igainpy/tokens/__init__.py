"""Fungible token ledgers"""
from .token import Token
