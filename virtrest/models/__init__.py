from .domain import *
