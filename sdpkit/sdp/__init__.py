"""SDP data model and offer/answer operations."""

from .common import *
from .direction import *
from .media import *
from .serialization import *
from .session import *
from .time import *
