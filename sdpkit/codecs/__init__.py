"""Codecs knowledge base: static codec properties and payload size formulas."""

from .base import *
from .payload import *
from .table import *
