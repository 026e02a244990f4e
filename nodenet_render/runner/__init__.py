from .scheduler import FrameScheduler
from .events import EventDispatcher
from .loop import EngineLoop
