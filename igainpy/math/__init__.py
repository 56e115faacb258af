"""Integer fixed-point primitives"""
from .fixed_point_integer_math import ONE_18, div_up, from_scaled, mul_div_down, mul_div_up, sqrt_floor
