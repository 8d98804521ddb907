from .tcp_receiver import *
from .tcp_sender import *
from .tcp_worker import *
from .worker import *
