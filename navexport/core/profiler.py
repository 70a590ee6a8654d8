"""
Иерархический профайлер экспорта.

Использование:
    from navexport.core.profiler import Profiler

    profiler = Profiler()

    with profiler.section("Collect"):
        with profiler.section("Octree"):
            ...
        with profiler.section("Levels"):
            ...

    with profiler.section("Write"):
        ...

    for name, ms in profiler.flat().items():
        print(f"{name}: {ms:.2f}ms")

Когда профайлер выключен (enabled=False), section() ничего не замеряет.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List


@dataclass
class SectionTiming:
    """Тайминг одной секции профилирования."""

    name: str
    cpu_ms: float = 0.0
    call_count: int = 0
    children: Dict[str, "SectionTiming"] = field(default_factory=dict)


class Profiler:
    """
    Иерархический профайлер на time.perf_counter.

    Повторный вход в секцию с тем же именем на том же уровне
    суммирует время и увеличивает call_count.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.sections: Dict[str, SectionTiming] = {}
        self._stack: List[SectionTiming] = []

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """
        Context manager для измерения секции кода.

        Args:
            name: Имя секции.
        """
        if not self.enabled:
            yield
            return

        siblings = self._stack[-1].children if self._stack else self.sections
        timing = siblings.get(name)
        if timing is None:
            timing = SectionTiming(name=name)
            siblings[name] = timing

        self._stack.append(timing)
        start = time.perf_counter()
        try:
            yield
        finally:
            timing.cpu_ms += (time.perf_counter() - start) * 1000.0
            timing.call_count += 1
            self._stack.pop()

    def total_ms(self) -> float:
        """Суммарное время корневых секций."""
        return sum(t.cpu_ms for t in self.sections.values())

    def flat(self) -> Dict[str, float]:
        """
        Плоский словарь "путь/секции" -> время в мс.

        Например: {"Collect": 8.5, "Collect/Octree": 6.1, "Write": 1.2}
        """
        result: Dict[str, float] = {}

        def collect(sections: Dict[str, SectionTiming], prefix: str = "") -> None:
            for name, timing in sections.items():
                full_path = f"{prefix}{name}"
                result[full_path] = timing.cpu_ms
                collect(timing.children, f"{full_path}/")

        collect(self.sections)
        return result

    def report_lines(self) -> List[str]:
        """Строки отчёта с отступами по глубине вложенности."""
        lines = []
        for name, ms in self.flat().items():
            indent = "  " * name.count("/")
            base_name = name.split("/")[-1]
            lines.append(f"{indent}{base_name:20} {ms:8.2f}ms")
        return lines
