from navexport.core.profiler import Profiler, SectionTiming

__all__ = ["Profiler", "SectionTiming"]
