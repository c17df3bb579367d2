from .prerequisites import build_prerequisite_graph, find_prerequisite_cycle
from .progress import module_progress, progress_overview
