from .console import *
from .network import *
from .packet import *
from .workers import *
