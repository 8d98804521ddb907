from .sockstream import *
from .tcp import *
